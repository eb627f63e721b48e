from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence
import logging, re

from .types import LayoutItem, StoredLayout, DashboardPreferences

log = logging.getLogger("dashboard.store")

_KEY_RE = re.compile(r"[^A-Za-z0-9_-]+")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LayoutStore:
    """
    Локальное key-value хранилище раскладок и настроек дашборда:
    по JSON-файлу на ключ, рядом с данными — отметка времени.
    Битые/нечитаемые файлы считаются отсутствующими.
    """

    def __init__(self, root: Path, namespace: str = "dashboard_layout"):
        self.root = Path(root)
        self.namespace = namespace
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str, suffix: str) -> Path:
        safe = _KEY_RE.sub("_", key) or "default"
        return self.root / f"{self.namespace}_{safe}{suffix}"

    def _read(self, p: Path, model):
        if not p.exists():
            return None
        try:
            return model.model_validate_json(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning(f"[Store] cannot read {p.name}: {e}")
            return None

    # ---- раскладка ----

    def load(self, key: str) -> Optional[StoredLayout]:
        return self._read(self._path(key, ".json"), StoredLayout)

    def save(self, key: str, layout: Sequence[LayoutItem], columns: int) -> StoredLayout:
        rec = StoredLayout(layout=list(layout), columns=columns, timestamp=_now_iso())
        p = self._path(key, ".json")
        p.write_text(rec.model_dump_json(by_alias=True), encoding="utf-8")
        log.info(f"[Store] saved layout {p.name}: {len(rec.layout)} cards, {columns} cols")
        return rec

    # ---- настройки ----

    def load_preferences(self, key: str) -> Optional[DashboardPreferences]:
        return self._read(self._path(key, ".prefs.json"), DashboardPreferences)

    def save_preferences(self, key: str, prefs: DashboardPreferences) -> DashboardPreferences:
        prefs = prefs.model_copy(update={"timestamp": _now_iso()})
        self._path(key, ".prefs.json").write_text(prefs.model_dump_json(), encoding="utf-8")
        return prefs
