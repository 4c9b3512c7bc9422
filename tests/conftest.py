from __future__ import annotations

from typing import Iterator

import pytest

from datastore.sample_store import build_default_store
from services.telemetry import build_default_service
from settings import get_settings

_CACHES = (get_settings, build_default_store, build_default_service)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch) -> Iterator[None]:
    """Point the default store at a temporary file and reset cached factories."""
    monkeypatch.setenv("SAMPLE_STORE_PERSISTENCE_PATH", str(tmp_path / "samples.json"))
    monkeypatch.setenv("DASHBOARD_TIMEZONE", "UTC")
    for cache in _CACHES:
        cache.cache_clear()
    yield
    for cache in _CACHES:
        cache.cache_clear()
