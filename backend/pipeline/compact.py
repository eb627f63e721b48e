# backend/pipeline/compact.py
from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .types import LayoutItem, CompactionResult

log = logging.getLogger("dashboard.compact")

# Предел проходов цикла сходимости. Гарантирует завершение на патологическом
# входе; на практике раскладка стабилизируется за 2–5 проходов.
MAX_ITERATIONS = 50


class InvalidLayoutError(ValueError):
    """Карточку нельзя разместить ни при каких координатах (w/h вне допустимого)."""

class DuplicateIdError(ValueError):
    """Два элемента раскладки с одним и тем же id."""


# ---------------------------------------------------------------------
# Карта занятости

class OccupancyGrid:
    """
    Занятость ячеек: (x, y) -> id карточки. Строится заново на каждый вызов
    компактора и обновляется инкрементально при каждом сдвиге.
    """
    def __init__(self, columns: int, items: Iterable[LayoutItem] = ()):
        self.columns = columns
        self._cells: Dict[Tuple[int, int], str] = {}
        for it in items:
            self.fill(it)

    @staticmethod
    def _span(x: int, y: int, w: int, h: int):
        for yy in range(y, y + h):
            for xx in range(x, x + w):
                yield xx, yy

    def fill(self, item: LayoutItem) -> None:
        for cell in self._span(item.x, item.y, item.w, item.h):
            self._cells[cell] = item.id

    def clear(self, item: LayoutItem) -> None:
        for cell in self._span(item.x, item.y, item.w, item.h):
            if self._cells.get(cell) == item.id:
                del self._cells[cell]

    def owner(self, x: int, y: int) -> Optional[str]:
        return self._cells.get((x, y))

    def is_free(self, x: int, y: int, w: int, h: int, ignore: Optional[str] = None) -> bool:
        """Можно ли поставить прямоугольник w×h в (x, y): все ячейки пусты или принадлежат ignore."""
        if x < 0 or y < 0 or x + w > self.columns:
            return False
        for cell in self._span(x, y, w, h):
            owner = self._cells.get(cell)
            if owner is not None and owner != ignore:
                return False
        return True

    @property
    def rows(self) -> int:
        return max((y + 1 for _, y in self._cells), default=0)


# ---------------------------------------------------------------------
# Валидация и нормализация

def validate_layout(layout: Sequence[LayoutItem], columns: int) -> None:
    if columns < 1:
        raise InvalidLayoutError(f"columns must be >= 1, got {columns}")
    seen = set()
    for it in layout:
        if it.id in seen:
            raise DuplicateIdError(f"duplicate layout id: {it.id!r}")
        seen.add(it.id)
        if it.w < 1 or it.w > columns:
            raise InvalidLayoutError(f"item {it.id!r}: width {it.w} does not fit {columns} column(s)")
        if it.h < 1:
            raise InvalidLayoutError(f"item {it.id!r}: height must be >= 1, got {it.h}")


def _working_copy(layout: Sequence[LayoutItem], columns: int) -> List[LayoutItem]:
    """Копии элементов с координатами, загнанными в границы сетки."""
    items = []
    for it in layout:
        c = it.model_copy()
        c.x = min(max(c.x, 0), columns - c.w)
        c.y = max(c.y, 0)
        items.append(c)
    return items


def _by_position(items: Sequence[LayoutItem]) -> List[LayoutItem]:
    # sorted() стабилен: при равных (y, x) выигрывает тот, кто раньше во входе
    return sorted(items, key=lambda it: (it.y, it.x))


# ---------------------------------------------------------------------
# Фазы

def vertical_compact(items: Sequence[LayoutItem], columns: int) -> int:
    """
    Фаза 1. Каждая карточка поднимается до максимума «заполненности»
    по своим колонкам. Возвращает число сдвинутых карточек.
    """
    filled = [0] * columns
    moved = 0
    for it in _by_position(items):
        top = max(filled[it.x:it.x + it.w])
        if top != it.y:
            it.y = top
            moved += 1
        for col in range(it.x, it.x + it.w):
            filled[col] = it.y + it.h
    return moved


def horizontal_compact(items: Sequence[LayoutItem], columns: int) -> int:
    """Фаза 2. Сдвиг влево по одной колонке, пока весь прямоугольник свободен."""
    grid = OccupancyGrid(columns, items)
    moved = 0
    for it in _by_position(items):
        if it.x == 0:
            continue
        new_x = it.x
        while new_x > 0 and grid.is_free(new_x - 1, it.y, it.w, it.h, ignore=it.id):
            new_x -= 1
        if new_x != it.x:
            grid.clear(it)
            it.x = new_x
            grid.fill(it)
            moved += 1
    return moved


def fill_gaps(items: Sequence[LayoutItem], columns: int) -> int:
    """
    Фаза 3. Ищем пустую ячейку, справа от которой что-то стоит, и переносим
    в неё первую подходящую карточку правее дыры. Закрывает случаи, когда
    фаза 2 упёрлась в карточку, которая сдвинулась позже.
    """
    grid = OccupancyGrid(columns, items)
    moved = 0
    for col in range(columns - 1):
        for row in range(grid.rows):
            if grid.owner(col, row) is not None or grid.owner(col + 1, row) is None:
                continue
            for it in _by_position(items):
                if it.x <= col or not (it.y <= row < it.y + it.h):
                    continue
                if grid.is_free(col, it.y, it.w, it.h, ignore=it.id):
                    grid.clear(it)
                    it.x = col
                    grid.fill(it)
                    moved += 1
                    break
    return moved


# ---------------------------------------------------------------------
# Цикл сходимости

def run_compaction(layout: Sequence[LayoutItem], columns: int,
                   max_iterations: int = MAX_ITERATIONS) -> CompactionResult:
    """
    Полная компактизация с метаданными: сколько проходов понадобилось
    и сошлась ли раскладка до предела max_iterations.

    Вход не меняется — работаем на копиях. Порядок элементов на выходе
    совпадает с порядком на входе.
    """
    validate_layout(layout, columns)
    items = _working_copy(layout, columns)

    iterations = 0
    converged = not items
    while not converged and iterations < max_iterations:
        iterations += 1
        moved = vertical_compact(items, columns)
        moved += horizontal_compact(items, columns)
        moved += fill_gaps(items, columns)
        converged = moved == 0

    # финальный вертикальный проход обязателен всегда
    vertical_compact(items, columns)

    if not converged:
        log.warning(f"[Compact] no convergence after {iterations} passes ({len(items)} items, {columns} cols)")
    else:
        log.debug(f"[Compact] converged in {iterations} passes ({len(items)} items, {columns} cols)")
    return CompactionResult(layout=items, iterations=iterations, converged=converged)


def compact(layout: Sequence[LayoutItem], columns: int,
            max_iterations: int = MAX_ITERATIONS) -> List[LayoutItem]:
    """Раскладка без дыр: каждая карточка прижата вверх и влево, наложений нет."""
    return run_compaction(layout, columns, max_iterations).layout
