# tests/conftest.py
import pytest

from backend.pipeline.store import LayoutStore


@pytest.fixture
def store(tmp_path):
    return LayoutStore(tmp_path / "layouts", namespace="test_layout")


@pytest.fixture
def app(store):
    from backend.main import app as _app, get_store
    _app.dependency_overrides[get_store] = lambda: store
    yield _app
    _app.dependency_overrides.clear()
