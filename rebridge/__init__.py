from __future__ import annotations

from .cursor import Cursor
from .errors import (
    Corrupt,
    EmptySequence,
    InvalidUsage,
    RebridgeError,
    StoreUnavailable,
    TypeMismatch,
    UnsupportedOperation,
    WriteConflict,
)
from .gateway import DocumentGateway
from .root import Rebridge
from .stores import DiskHashStore, HashStore, MemoryHashStore, RedisHashStore, VersionedHashStore, create_store

__all__ = [
    "Rebridge",
    "Cursor",
    "DocumentGateway",
    "HashStore",
    "VersionedHashStore",
    "MemoryHashStore",
    "DiskHashStore",
    "RedisHashStore",
    "create_store",
    "RebridgeError",
    "StoreUnavailable",
    "Corrupt",
    "UnsupportedOperation",
    "InvalidUsage",
    "TypeMismatch",
    "EmptySequence",
    "WriteConflict",
]
