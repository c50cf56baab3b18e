from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import sys
from typing import Callable


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


class FakeBlobStore:
    """In-memory BlobStore that records calls and can be told to fail."""

    def __init__(self) -> None:
        self.data: dict[str, str | bytes] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail = False
        self.closed = 0

    def get(self, key: str) -> str | bytes | None:
        from persistence.interfaces import BlobStoreError

        self.calls.append(("get", key))
        if self.fail:
            raise BlobStoreError("boom")
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        from persistence.interfaces import BlobStoreError

        self.calls.append(("set", key))
        if self.fail:
            raise BlobStoreError("boom")
        self.data[key] = value

    def close(self) -> None:
        self.closed += 1


@pytest.fixture
def fake_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def make_settings() -> Callable[..., object]:
    from settings import Settings

    def _make(**overrides):
        return replace(Settings(), **overrides)

    return _make


@pytest.fixture
def make_client(fake_store: FakeBlobStore, make_settings):
    """
    Build a TestClient around create_app() with injected settings and store.
    Pass `store=None` to simulate an unconfigured store.
    """
    from fastapi.testclient import TestClient

    import app as app_module

    _unset = object()

    def _make(store=_unset, **settings_overrides) -> TestClient:
        target = fake_store if store is _unset else store
        settings = make_settings(**settings_overrides)
        return TestClient(app_module.create_app(settings=settings, store_opener=lambda: target))

    return _make
