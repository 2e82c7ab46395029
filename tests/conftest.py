from __future__ import annotations

import asyncio
import json
from pathlib import Path
import sys
from typing import Any


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection,
# so `import app` works without installing the project.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def store():
    from rebridge.stores import MemoryHashStore

    return MemoryHashStore()


@pytest.fixture
def db(store):
    from rebridge import Rebridge

    return Rebridge(store)


@pytest.fixture
def stored(store):
    """
    Read a root document straight from the store, bypassing the gateway.
    """

    def _stored(root: str, namespace: str = "rebridge") -> Any:
        raw = asyncio.run(store.hget(namespace, root))
        return None if raw is None else json.loads(raw)

    return _stored


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in (
        "REBRIDGE_BACKEND",
        "REBRIDGE_NAMESPACE",
        "REBRIDGE_DATA_DIR",
        "REBRIDGE_REDIS_URL",
        "REBRIDGE_OPTIMISTIC",
        "REBRIDGE_MAX_RETRIES",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
