from __future__ import annotations

import asyncio

from .interfaces import VersionedHashStore


class MemoryHashStore(VersionedHashStore):
    """
    Process-local store, mostly for tests and local development.

    Every call yields to the event loop once so that concurrent
    read-modify-write cycles interleave the way they would against a
    remote store.
    """

    def __init__(self) -> None:
        self._data: dict[tuple[str, str], bytes] = {}
        self._versions: dict[tuple[str, str], int] = {}

    async def hget(self, namespace: str, key: str) -> bytes | None:
        await asyncio.sleep(0)
        return self._data.get((namespace, key))

    async def hset(self, namespace: str, key: str, value: bytes) -> None:
        await asyncio.sleep(0)
        self._put((namespace, key), value)

    async def hget_versioned(self, namespace: str, key: str) -> tuple[bytes | None, int]:
        await asyncio.sleep(0)
        return self._data.get((namespace, key)), self._versions.get((namespace, key), 0)

    async def hset_if_version(self, namespace: str, key: str, value: bytes, version: int) -> bool:
        await asyncio.sleep(0)
        if self._versions.get((namespace, key), 0) != version:
            return False
        self._put((namespace, key), value)
        return True

    def _put(self, slot: tuple[str, str], value: bytes) -> None:
        self._data[slot] = bytes(value)
        self._versions[slot] = self._versions.get(slot, 0) + 1
