# backend/pipeline/dashboard.py
from __future__ import annotations
import logging
from typing import Optional, Sequence

from ..config import settings
from .cards import CARD_IDS, card_options, normalize_visible, toggle_visibility
from .compact import compact
from .layout import default_layout, merge_layout
from .store import LayoutStore
from .types import DashboardPreferences, DashboardState, LayoutItem, TraderProfileType

log = logging.getLogger("dashboard.state")


def _prefs_or_default(store: LayoutStore, key: str) -> DashboardPreferences:
    prefs = store.load_preferences(key)
    if prefs is None:
        columns = min(max(settings.GRID_COLUMNS, 1), 3)
        prefs = DashboardPreferences(columns=columns, visible_cards=list(CARD_IDS))
    return prefs


def _state(prefs: DashboardPreferences, layout: Sequence[LayoutItem]) -> DashboardState:
    visible = normalize_visible(prefs.visible_cards)
    return DashboardState(
        columns=prefs.columns,
        visible_cards=visible,
        trader_profile=prefs.trader_profile,
        layout=list(layout),
        cards=card_options(visible),
    )


def _fresh_layout(visible: Sequence[str], columns: int):
    return compact(default_layout(visible, columns), columns, settings.COMPACT_MAX_ITERATIONS)


def load_dashboard(store: LayoutStore, key: str) -> DashboardState:
    """
    Текущее состояние: сохранённая раскладка + новые видимые карточки.
    Если раскладки нет или она сохранена под другое число колонок — раскладка по умолчанию.
    """
    prefs = _prefs_or_default(store, key)
    visible = normalize_visible(prefs.visible_cards)
    saved = store.load(key)
    if saved is not None and saved.columns == prefs.columns:
        layout = merge_layout(saved.layout, visible, prefs.columns, settings.COMPACT_MAX_ITERATIONS)
    else:
        layout = _fresh_layout(visible, prefs.columns)
    return _state(prefs, layout)


def toggle_card(store: LayoutStore, key: str, card_id: str) -> DashboardState:
    current = load_dashboard(store, key)
    visible = toggle_visibility(current.visible_cards, card_id)
    prefs = store.save_preferences(key, DashboardPreferences(
        columns=current.columns, visible_cards=visible,
        trader_profile=current.trader_profile,
    ))
    layout = merge_layout(current.layout, visible, prefs.columns, settings.COMPACT_MAX_ITERATIONS)
    store.save(key, layout, prefs.columns)
    log.info(f"[Dashboard] {key}: toggled {card_id}, {len(visible)} visible")
    return _state(prefs, layout)


def set_columns(store: LayoutStore, key: str, columns: int) -> DashboardState:
    # при смене числа колонок раскладка строится заново, как в исходном дашборде
    current = load_dashboard(store, key)
    prefs = store.save_preferences(key, DashboardPreferences(
        columns=columns, visible_cards=current.visible_cards,
        trader_profile=current.trader_profile,
    ))
    layout = _fresh_layout(prefs.visible_cards, columns)
    store.save(key, layout, columns)
    return _state(prefs, layout)


def update_layout(store: LayoutStore, key: str, layout: Sequence[LayoutItem]) -> DashboardState:
    """Результат перетаскивания/ресайза: компактим и сохраняем."""
    prefs = _prefs_or_default(store, key)
    merged = merge_layout(layout, prefs.visible_cards, prefs.columns, settings.COMPACT_MAX_ITERATIONS)
    store.save(key, merged, prefs.columns)
    return _state(prefs, merged)


def save_preferences(store: LayoutStore, key: str, columns: int, visible_cards: Sequence[str],
                     trader_profile: Optional[TraderProfileType] = None) -> DashboardState:
    prefs = store.save_preferences(key, DashboardPreferences(
        columns=columns,
        visible_cards=normalize_visible(visible_cards),
        trader_profile=trader_profile or "custom",
    ))
    layout = _fresh_layout(prefs.visible_cards, columns)
    store.save(key, layout, columns)
    return _state(prefs, layout)
