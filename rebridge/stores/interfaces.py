from __future__ import annotations

from typing import Protocol


class HashStore(Protocol):
    """
    Minimal hash-store interface: serialized blobs keyed by name inside a namespace.
    """

    async def hget(self, namespace: str, key: str) -> bytes | None:
        """Return the stored blob, or None when the key was never written."""
        ...

    async def hset(self, namespace: str, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous blob."""
        ...


class VersionedHashStore(HashStore, Protocol):
    """
    A hash store that stamps every key with an integer version, bumped on each write.
    Keys that were never written are at version 0.
    """

    async def hget_versioned(self, namespace: str, key: str) -> tuple[bytes | None, int]: ...

    async def hset_if_version(self, namespace: str, key: str, value: bytes, version: int) -> bool:
        """Write only if the key is still at ``version``. Returns False on conflict."""
        ...
