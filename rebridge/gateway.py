from __future__ import annotations

import contextlib
import json
import logging
from typing import Any, Callable, Iterator, Sequence

from .errors import Corrupt, InvalidUsage, RebridgeError, StoreUnavailable, WriteConflict
from .nested import nested_delete, nested_get, nested_pop, nested_push, nested_set
from .stores.interfaces import HashStore

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "rebridge"

Mutator = Callable[[Any], tuple[Any, Any]]


def decode(root: str, raw: bytes | str | None) -> Any:
    if raw is None:
        return None
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        return json.loads(text)
    except (ValueError, RecursionError) as e:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors
        raise Corrupt(root, str(e)) from e


def encode(doc: Any) -> bytes:
    try:
        text = json.dumps(doc, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except ValueError as e:
        raise InvalidUsage(f"Value is not plain JSON: {e}") from e
    return text.encode("utf-8")


@contextlib.contextmanager
def _store_errors(op: str, root: str) -> Iterator[None]:
    try:
        yield
    except RebridgeError:
        raise
    except Exception as e:
        logger.warning("STORE %s %s failed: %r", op, root, e)
        raise StoreUnavailable(f"{op} {root} failed: {e}") from e


class DocumentGateway:
    """
    Runs one read-modify-write cycle per terminal operation against a hash store.

    With ``optimistic=False`` (the default) each mutation is a plain get followed
    by a plain set. Two cycles racing on the same root can lose an update; the
    last write wins.

    With ``optimistic=True`` the store must implement ``VersionedHashStore``.
    The write-back only lands if the root's version is unchanged since the read;
    otherwise the cycle is re-run, up to ``max_retries`` extra times.
    """

    def __init__(
        self,
        store: HashStore,
        namespace: str = DEFAULT_NAMESPACE,
        *,
        optimistic: bool = False,
        max_retries: int = 3,
    ):
        if optimistic and not hasattr(store, "hset_if_version"):
            raise TypeError(f"{type(store).__name__} does not support versioned writes")
        self._store = store
        self._namespace = namespace
        self._optimistic = optimistic
        self._max_retries = max_retries

    @property
    def store(self) -> HashStore:
        return self._store

    @property
    def namespace(self) -> str:
        return self._namespace

    async def read(self, root: str, path: Sequence[str]) -> Any:
        with _store_errors("HGET", root):
            raw = await self._store.hget(self._namespace, root)
        return nested_get(decode(root, raw), path)

    async def set(self, root: str, path: Sequence[str], value: Any) -> Any:
        return await self._cycle(root, "set", path, lambda doc: nested_set(doc, path, value))

    async def delete(self, root: str, path: Sequence[str], key: str) -> bool:
        # Nothing removed means nothing to write back.
        return await self._cycle(
            root, "delete", path, lambda doc: nested_delete(doc, path, key), changed=bool
        )

    async def push(self, root: str, path: Sequence[str], value: Any) -> int:
        return await self._cycle(root, "push", path, lambda doc: nested_push(doc, path, value))

    async def pop(self, root: str, path: Sequence[str]) -> Any:
        return await self._cycle(root, "pop", path, lambda doc: nested_pop(doc, path))

    async def _cycle(
        self,
        root: str,
        op: str,
        path: Sequence[str],
        mutate: Mutator,
        changed: Callable[[Any], bool] | None = None,
    ) -> Any:
        logger.debug("RMW %s %s path=%s", op, root, list(path))
        if not self._optimistic:
            with _store_errors("HGET", root):
                raw = await self._store.hget(self._namespace, root)
            doc, result = mutate(decode(root, raw))
            if changed is not None and not changed(result):
                return result
            payload = encode(doc)
            with _store_errors("HSET", root):
                await self._store.hset(self._namespace, root, payload)
            return result

        attempts = 0
        while True:
            attempts += 1
            with _store_errors("HGET", root):
                raw, version = await self._store.hget_versioned(self._namespace, root)
            doc, result = mutate(decode(root, raw))
            if changed is not None and not changed(result):
                return result
            payload = encode(doc)
            with _store_errors("HSET", root):
                written = await self._store.hset_if_version(self._namespace, root, payload, version)
            if written:
                return result
            if attempts > self._max_retries:
                raise WriteConflict(root, attempts)
            logger.warning("RMW %s %s: version %d changed underneath, retrying (%d)", op, root, version, attempts)
