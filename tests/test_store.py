"""
Tests for the layout store.
"""

from backend.pipeline import dashboard
from backend.pipeline.cards import CARD_IDS
from backend.pipeline.store import LayoutStore
from backend.pipeline.types import DashboardPreferences, LayoutItem


def test_missing_key_returns_none(store):
    assert store.load("nobody") is None
    assert store.load_preferences("nobody") is None


def test_save_and_load_roundtrip(store):
    layout = [LayoutItem(id="profile", x=0, y=0, w=1, h=2, min_w=1, max_w=1)]
    rec = store.save("alice", layout, 3)
    assert rec.timestamp

    loaded = store.load("alice")
    assert loaded.columns == 3
    assert loaded.layout == layout
    assert loaded.timestamp == rec.timestamp


def test_file_uses_namespace_and_aliases(store):
    store.save("alice", [LayoutItem(id="a", w=1, h=1, max_w=1)], 2)
    p = store.root / "test_layout_alice.json"
    assert p.exists()
    assert '"maxW":1' in p.read_text(encoding="utf-8")


def test_key_is_sanitized(store):
    store.save("../evil key", [], 1)
    assert store.load("../evil key") is not None
    assert all(p.parent == store.root for p in store.root.iterdir())


def test_corrupt_file_is_ignored(store):
    (store.root / "test_layout_bob.json").write_text("{not json", encoding="utf-8")
    assert store.load("bob") is None


def test_undecodable_files_are_ignored(store):
    (store.root / "test_layout_bob.json").write_bytes(b'\xff\xfe{"layout":[]}')
    (store.root / "test_layout_bob.prefs.json").write_bytes(b"\xff\xfe")
    assert store.load("bob") is None
    assert store.load_preferences("bob") is None

    # дашборд откатывается к настройкам по умолчанию
    state = dashboard.load_dashboard(store, "bob")
    assert state.visible_cards == CARD_IDS
    assert len(state.layout) == len(CARD_IDS)


def test_preferences_get_timestamp(store):
    saved = store.save_preferences("alice", DashboardPreferences(columns=2, visible_cards=["profile"]))
    assert saved.timestamp is not None

    loaded = store.load_preferences("alice")
    assert loaded.columns == 2
    assert loaded.visible_cards == ["profile"]
    assert loaded.timestamp == saved.timestamp


def test_separate_namespaces(tmp_path):
    a = LayoutStore(tmp_path, namespace="one")
    b = LayoutStore(tmp_path, namespace="two")
    a.save("k", [LayoutItem(id="x", w=1, h=1)], 1)
    assert b.load("k") is None
