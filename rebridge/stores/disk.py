from __future__ import annotations

import asyncio
import json
import logging
import threading
from pathlib import Path
from typing import Any

from ..errors import Corrupt, StoreUnavailable
from .interfaces import VersionedHashStore

logger = logging.getLogger(__name__)


class _FileLocks:
    """
    One lock per resolved file path, shared by every DiskHashStore in the process.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def __call__(self, path: Path) -> threading.Lock:
        key = str(path.resolve())
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())


FILE_LOCKS = _FileLocks()


def _read_entries(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return {}
    try:
        entries = json.loads(raw)
    except ValueError as e:
        raise Corrupt(path.name, str(e)) from e
    if not isinstance(entries, dict):
        raise Corrupt(path.name, "namespace file is not a JSON object")
    return entries


def _atomic_write_entries(path: Path, entries: dict[str, Any]) -> None:
    """
    Rewrite the whole namespace file: every key's ``{"value", "version"}`` entry,
    not just the one that changed. Stored documents are kept as their serialized
    text (non-ASCII left as is), and the file is swapped in via a sibling temp file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(entries, f, indent=2, sort_keys=True, ensure_ascii=False)
        f.write("\n")
    tmp_path.replace(path)


class DiskHashStore(VersionedHashStore):
    """
    Stores each namespace as one JSON file under ``data_dir``:

      { "<key>": { "value": "<serialized root document>", "version": 3 } }

    File I/O runs in a worker thread so the event loop is never blocked.
    """

    def __init__(self, data_dir: Path | str):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, namespace: str) -> Path:
        safe = (namespace.strip() or "default").replace("/", "_")
        return self._data_dir / f"{safe}.json"

    async def hget(self, namespace: str, key: str) -> bytes | None:
        value, _ = await self.hget_versioned(namespace, key)
        return value

    async def hset(self, namespace: str, key: str, value: bytes) -> None:
        await asyncio.to_thread(self._write, namespace, key, value, None)

    async def hget_versioned(self, namespace: str, key: str) -> tuple[bytes | None, int]:
        return await asyncio.to_thread(self._read, namespace, key)

    async def hset_if_version(self, namespace: str, key: str, value: bytes, version: int) -> bool:
        return await asyncio.to_thread(self._write, namespace, key, value, version)

    def _read(self, namespace: str, key: str) -> tuple[bytes | None, int]:
        path = self.path_for(namespace)
        try:
            with FILE_LOCKS(path):
                entry = _read_entries(path).get(key)
        except OSError as e:
            logger.warning("DISK STORE: failed to read %s: %r", path, e)
            raise StoreUnavailable(f"Cannot read {path}") from e
        if not isinstance(entry, dict):
            return None, 0
        value = entry.get("value")
        return (value.encode("utf-8") if isinstance(value, str) else None), int(entry.get("version", 0))

    def _write(self, namespace: str, key: str, value: bytes, expected_version: int | None) -> bool:
        path = self.path_for(namespace)
        try:
            with FILE_LOCKS(path):
                entries = _read_entries(path)
                entry = entries.get(key)
                current = int(entry.get("version", 0)) if isinstance(entry, dict) else 0
                if expected_version is not None and current != expected_version:
                    return False
                entries[key] = {"value": bytes(value).decode("utf-8"), "version": current + 1}
                _atomic_write_entries(path, entries)
        except OSError as e:
            logger.warning("DISK STORE: failed to write %s: %r", path, e)
            raise StoreUnavailable(f"Cannot write {path}") from e
        return True
