# backend/config.py

from __future__ import annotations
import logging
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
BASE_DIR = Path(__file__).resolve().parent
# =========================
# Константы сетки (вне Pydantic-модели!)
# =========================
MIN_COLUMNS = 1
MAX_PREF_COLUMNS = 3               # в настройках дашборда доступны только 1/2/3 колонки
DEFAULT_CARD_HEIGHT = 2            # все карточки по умолчанию высотой в 2 ряда

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s: %(message)s"

# =========================
# Переменные окружения / настройки приложения
# =========================
class Settings(BaseSettings):
    # ---- App ----
    APP_NAME: str = "dashboard-layout"

    # ---- Сетка / компактор ----
    GRID_COLUMNS: int = 3                  # колонок по умолчанию (как в исходном дашборде)
    COMPACT_MAX_ITERATIONS: int = 50       # жёсткий предел проходов компактора

    # ---- Хранилище раскладок ----
    CACHE_DIR: Path = Path.home() / ".dashboard_cache"
    LAYOUT_NAMESPACE: str = "dashboard_layout"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )



# Глобальный инстанс настроек
settings = Settings()

# FS + логгер
settings.CACHE_DIR = Path(str(settings.CACHE_DIR)).expanduser()
(settings.CACHE_DIR / "layouts").mkdir(parents=True, exist_ok=True)

logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
log = logging.getLogger("dashboard")
log.info(f"[Settings] GRID_COLUMNS={settings.GRID_COLUMNS} CACHE_DIR={settings.CACHE_DIR}")
