from __future__ import annotations

import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError, WatchError

from ..errors import StoreUnavailable
from .interfaces import VersionedHashStore

logger = logging.getLogger(__name__)


def versions_key(namespace: str) -> str:
    return f"{namespace}:versions"


class RedisHashStore(VersionedHashStore):
    """
    Root documents live in the Redis hash named after the namespace; their
    version stamps live in a sibling hash, ``<namespace>:versions``.
    """

    def __init__(self, client: Any):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisHashStore":
        return cls(aioredis.from_url(url))

    async def hget(self, namespace: str, key: str) -> bytes | None:
        try:
            return await self._client.hget(namespace, key)
        except RedisError as e:
            logger.warning("REDIS HGET %s/%s failed: %r", namespace, key, e)
            raise StoreUnavailable(f"HGET {namespace} {key} failed") from e

    async def hset(self, namespace: str, key: str, value: bytes) -> None:
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.hset(namespace, key, value)
                pipe.hincrby(versions_key(namespace), key, 1)
                await pipe.execute()
        except RedisError as e:
            logger.warning("REDIS HSET %s/%s failed: %r", namespace, key, e)
            raise StoreUnavailable(f"HSET {namespace} {key} failed") from e

    async def hget_versioned(self, namespace: str, key: str) -> tuple[bytes | None, int]:
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.hget(namespace, key)
                pipe.hget(versions_key(namespace), key)
                value, version = await pipe.execute()
        except RedisError as e:
            logger.warning("REDIS HGET %s/%s failed: %r", namespace, key, e)
            raise StoreUnavailable(f"HGET {namespace} {key} failed") from e
        return value, int(version or 0)

    async def hset_if_version(self, namespace: str, key: str, value: bytes, version: int) -> bool:
        vkey = versions_key(namespace)
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                await pipe.watch(vkey)
                current = int(await pipe.hget(vkey, key) or 0)
                if current != version:
                    await pipe.unwatch()
                    return False
                pipe.multi()
                pipe.hset(namespace, key, value)
                pipe.hincrby(vkey, key, 1)
                await pipe.execute()
        except WatchError:
            return False
        except RedisError as e:
            logger.warning("REDIS HSET %s/%s failed: %r", namespace, key, e)
            raise StoreUnavailable(f"HSET {namespace} {key} failed") from e
        return True

    async def close(self) -> None:
        await self._client.aclose()
