"""
Tests for default placement, card catalog and merging saved layouts.
"""

import pytest

from backend.pipeline.cards import (
    CARD_IDS,
    UnknownCardError,
    card_options,
    normalize_visible,
    toggle_visibility,
)
from backend.pipeline.compact import compact
from backend.pipeline.layout import default_layout, merge_layout
from backend.pipeline.types import LayoutItem


def positions(layout):
    return {it.id: (it.x, it.y, it.w) for it in layout}


class TestCards:
    def test_normalize_keeps_catalog_order(self):
        assert normalize_visible(["social", "bogus", "profile", "social"]) == ["profile", "social"]

    def test_toggle(self):
        visible = toggle_visibility(CARD_IDS, "signals")
        assert "signals" not in visible
        assert toggle_visibility(visible, "signals") == CARD_IDS

    def test_toggle_unknown(self):
        with pytest.raises(UnknownCardError):
            toggle_visibility(CARD_IDS, "nope")

    def test_card_options(self):
        opts = card_options(["profile"])
        assert [o.id for o in opts] == CARD_IDS
        assert [o.id for o in opts if o.visible] == ["profile"]


class TestDefaultLayout:
    def test_three_columns_table(self):
        out = default_layout(CARD_IDS, 3)
        pos = positions(out)
        assert pos["profile"] == (0, 0, 1)
        assert pos["tokenSearch"] == (0, 2, 2)
        assert pos["chatHistory"] == (2, 4, 1)
        assert all(it.h == 2 for it in out)
        # таблица по умолчанию уже плотная
        assert compact(out, 3) == out

    def test_three_columns_filters_hidden(self):
        out = default_layout(["signals", "social"], 3)
        assert [it.id for it in out] == ["signals", "social"]

    def test_two_columns_flow(self):
        out = default_layout(CARD_IDS, 2)
        pos = positions(out)
        assert pos["profile"] == (0, 0, 1)
        assert pos["investment"] == (1, 0, 1)
        assert pos["signals"] == (0, 2, 1)
        # широкая карточка во второй позиции уходит на новый ряд
        assert pos["tokenSearch"] == (0, 4, 2)
        assert pos["tokenDetails"] == (0, 6, 1)

    def test_two_columns_wide_max_width(self):
        out = {it.id: it for it in default_layout(["profile", "tokenSearch"], 2)}
        assert out["tokenSearch"].max_w == 2
        assert out["profile"].max_w == 1

    def test_one_column(self):
        out = default_layout(["profile", "investment", "social"], 1)
        assert [(it.x, it.y) for it in out] == [(0, 0), (0, 2), (0, 4)]

    def test_other_column_count_first_fit(self):
        out = default_layout(CARD_IDS, 4)
        pos = positions(out)
        assert pos["profile"] == (0, 0, 1)
        assert pos["signals"] == (2, 0, 1)
        assert pos["tokenSearch"] == (0, 2, 2)
        assert pos["tokenDetails"] == (3, 0, 1)
        assert pos["social"] == (2, 2, 1)
        assert compact(out, 4) == out


class TestMerge:
    def test_hidden_removed_and_new_seeded(self):
        saved = [
            LayoutItem(id="signals", x=0, y=0, w=1, h=2),
            LayoutItem(id="profile", x=1, y=0, w=1, h=2),
        ]
        out = merge_layout(saved, ["signals", "social"], 3)
        pos = positions(out)
        assert set(pos) == {"signals", "social"}
        assert pos["signals"] == (0, 0, 1)
        # новая карточка посеяна под сохранённой областью и поднята компактором
        assert pos["social"] == (0, 2, 1)

    def test_saved_width_clamped(self):
        saved = [LayoutItem(id="tokenSearch", x=0, y=0, w=3, h=2)]
        out = merge_layout(saved, ["tokenSearch"], 2)
        assert positions(out) == {"tokenSearch": (0, 0, 2)}

    def test_duplicates_in_saved_are_dropped(self):
        saved = [
            LayoutItem(id="profile", x=2, y=0, w=1, h=2),
            LayoutItem(id="profile", x=0, y=0, w=1, h=2),
        ]
        out = merge_layout(saved, ["profile"], 3)
        assert positions(out) == {"profile": (0, 0, 1)}
