# backend/main.py
from __future__ import annotations

import logging
import logging.handlers
import sys
from typing import List

from fastapi import Depends, FastAPI, Request
from fastapi.responses import ORJSONResponse

from .config import settings, LOG_FORMAT
from .pipeline import dashboard
from .pipeline.cards import CATALOG, UnknownCardError
from .pipeline.compact import run_compaction, InvalidLayoutError, DuplicateIdError
from .pipeline.store import LayoutStore
from .pipeline.types import (
    CardOption, ColumnsRequest, CompactRequest, CompactResponse, DashboardState,
    LayoutUpdateRequest, PreferencesRequest, ToggleRequest,
)

log = logging.getLogger("dashboard")

def _setup_logging():
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    # консоль
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        sh = logging.StreamHandler(sys.stdout)
        sh.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(sh)
    # файл
    if not any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers):
        fh = logging.handlers.RotatingFileHandler(
            filename=str(settings.CACHE_DIR / "server.log"),
            maxBytes=5_000_000, backupCount=3, encoding="utf-8"
        )
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(fh)

_setup_logging()

# === STORE LAZY SINGLETON ===
_STORE = None

def get_store() -> LayoutStore:
    global _STORE
    if _STORE is None:
        _STORE = LayoutStore(settings.CACHE_DIR / "layouts", namespace=settings.LAYOUT_NAMESPACE)
    return _STORE
# === /STORE LAZY SINGLETON ===


# ---------------------------------------------------------------------

app = FastAPI(
    title=settings.APP_NAME,
    default_response_class=ORJSONResponse
)

@app.exception_handler(InvalidLayoutError)
@app.exception_handler(DuplicateIdError)
async def _layout_error(request: Request, exc: ValueError):
    log.warning(f"[API] {request.url.path}: {exc}")
    return ORJSONResponse(status_code=422, content={"detail": str(exc)})

@app.exception_handler(UnknownCardError)
async def _unknown_card(request: Request, exc: UnknownCardError):
    return ORJSONResponse(status_code=404, content={"detail": f"unknown card: {exc.args[0]}"})

# ---------------------------------------------------------------------

@app.on_event("startup")
async def on_startup():
    log.info(f"Startup: GRID_COLUMNS={settings.GRID_COLUMNS}, MAX_ITERATIONS={settings.COMPACT_MAX_ITERATIONS}")
    log.info(f"Layouts dir: {settings.CACHE_DIR / 'layouts'} | namespace={settings.LAYOUT_NAMESPACE}")

@app.get("/health")
async def health():
    return {"ok": True}

@app.get("/api/cards", response_model=List[CardOption])
async def list_cards():
    return CATALOG

@app.post("/api/layout/compact", response_model=CompactResponse)
async def compact_layout(req: CompactRequest):
    """Чистая компактизация: раскладка + число колонок -> раскладка без дыр."""
    res = run_compaction(req.layout, req.columns, settings.COMPACT_MAX_ITERATIONS)
    return CompactResponse(layout=res.layout, iterations=res.iterations, converged=res.converged)

# ---- состояние дашборда пользователя ----

@app.get("/api/dashboard/{user}", response_model=DashboardState)
def get_dashboard(user: str, store: LayoutStore = Depends(get_store)):
    return dashboard.load_dashboard(store, user)

@app.put("/api/dashboard/{user}/layout", response_model=DashboardState)
def put_layout(user: str, req: LayoutUpdateRequest, store: LayoutStore = Depends(get_store)):
    return dashboard.update_layout(store, user, req.layout)

@app.post("/api/dashboard/{user}/toggle", response_model=DashboardState)
def toggle(user: str, req: ToggleRequest, store: LayoutStore = Depends(get_store)):
    return dashboard.toggle_card(store, user, req.card_id)

@app.post("/api/dashboard/{user}/columns", response_model=DashboardState)
def columns(user: str, req: ColumnsRequest, store: LayoutStore = Depends(get_store)):
    return dashboard.set_columns(store, user, req.columns)

@app.post("/api/dashboard/{user}/preferences", response_model=DashboardState)
def preferences(user: str, req: PreferencesRequest, store: LayoutStore = Depends(get_store)):
    return dashboard.save_preferences(store, user, req.columns, req.visible_cards, req.trader_profile)
