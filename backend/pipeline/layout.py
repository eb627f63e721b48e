# backend/pipeline/layout.py
from __future__ import annotations
from typing import List, Dict, Sequence

from ..config import DEFAULT_CARD_HEIGHT
from .cards import CARD_IDS, WIDE_CARDS, normalize_visible
from .compact import compact, MAX_ITERATIONS
from .types import LayoutItem

H = DEFAULT_CARD_HEIGHT

# Фиксированная раскладка для 3 колонок: id -> (x, y, w, minW, maxW)
_THREE_COLUMNS: Dict[str, tuple] = {
    "profile":      (0, 0, 1, 1, 1),
    "investment":   (1, 0, 1, 1, 1),
    "signals":      (2, 0, 1, 1, 1),
    "tokenSearch":  (0, 2, 2, 1, None),
    "tokenDetails": (2, 2, 1, 1, 1),
    "social":       (0, 4, 1, 1, 1),
    "performance":  (1, 4, 1, 1, None),
    "chatHistory":  (2, 4, 1, 1, None),
}


def _three_columns(visible: List[str]) -> List[LayoutItem]:
    out = []
    for cid in visible:
        x, y, w, min_w, max_w = _THREE_COLUMNS[cid]
        out.append(LayoutItem(id=cid, x=x, y=y, w=w, h=H, min_w=min_w, max_w=max_w))
    return out


def _two_columns(visible: List[str]) -> List[LayoutItem]:
    """
    Построчный поток по 2 колонки. Широкая карточка занимает весь ряд;
    если она попала во вторую позицию — переносим её на новый ряд.
    """
    out = []
    x, y = 0, 0
    for cid in visible:
        wide = cid in WIDE_CARDS
        if wide and x == 1:
            x, y = 0, y + H
        w = 2 if wide else 1
        out.append(LayoutItem(id=cid, x=x, y=y, w=w, h=H, min_w=1, max_w=w))
        if w == 2 or x == 1:
            x, y = 0, y + H
        else:
            x += 1
    return out


def _one_column(visible: List[str]) -> List[LayoutItem]:
    return [LayoutItem(id=cid, x=0, y=i * H, w=1, h=H, min_w=1, max_w=1)
            for i, cid in enumerate(visible)]


def _first_fit(visible: List[str], columns: int) -> List[LayoutItem]:
    """Любое другое число колонок: первая свободная позиция сверху-вниз, слева-направо."""
    rows = max(1, len(visible) * H)
    grid = [[False] * columns for _ in range(rows)]

    def place(w: int, h: int) -> tuple[int, int]:
        y = 0
        while True:
            while y + h > len(grid):
                grid.append([False] * columns)
            for x in range(columns - w + 1):
                if all(not grid[yy][xx] for yy in range(y, y + h) for xx in range(x, x + w)):
                    for yy in range(y, y + h):
                        for xx in range(x, x + w):
                            grid[yy][xx] = True
                    return x, y
            y += 1

    out = []
    for cid in visible:
        w = min(2 if cid in WIDE_CARDS else 1, columns)
        x, y = place(w, H)
        out.append(LayoutItem(id=cid, x=x, y=y, w=w, h=H, min_w=1))
    return out


def default_layout(visible: Sequence[str], columns: int) -> List[LayoutItem]:
    """
    Раскладка по умолчанию для видимых карточек.
    Неизвестные id отбрасываются, порядок — как в каталоге.
    """
    ids = normalize_visible(visible)
    if columns == 3:
        return _three_columns(ids)
    if columns == 2:
        return _two_columns(ids)
    if columns == 1:
        return _one_column(ids)
    return _first_fit(ids, columns)


def merge_layout(saved: Sequence[LayoutItem], visible: Sequence[str], columns: int,
                 max_iterations: int = MAX_ITERATIONS) -> List[LayoutItem]:
    """
    Сохранённая раскладка + новые видимые карточки.
    Скрытые карточки выбрасываем, новые берём из раскладки по умолчанию
    и ставим под уже занятую область, затем всё компактим.
    """
    ids = normalize_visible(visible)
    shown = set(ids)
    kept: List[LayoutItem] = []
    known = set()
    for it in saved:
        if it.id not in shown or it.id in known:
            continue
        known.add(it.id)
        # ширину сохранённых карточек подрезаем под текущее число колонок
        kept.append(it.model_copy(update={"w": min(it.w, columns)}))

    bottom = max((it.y + it.h for it in kept), default=0)
    seeds = [
        it.model_copy(update={"y": it.y + bottom})
        for it in default_layout(ids, columns)
        if it.id not in known
    ]
    return compact(kept + seeds, columns, max_iterations)
