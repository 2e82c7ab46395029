from __future__ import annotations

from ..settings import Settings
from .disk import DiskHashStore
from .interfaces import HashStore, VersionedHashStore
from .memory import MemoryHashStore
from .redis_store import RedisHashStore


def create_store(settings: Settings) -> HashStore:
    if settings.backend == "disk":
        return DiskHashStore(settings.data_dir)
    if settings.backend == "redis":
        return RedisHashStore.from_url(settings.redis_url)
    return MemoryHashStore()


__all__ = [
    "HashStore",
    "VersionedHashStore",
    "MemoryHashStore",
    "DiskHashStore",
    "RedisHashStore",
    "create_store",
]
