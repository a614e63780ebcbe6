"""Redis-compatible record store keeping one hash per entity type."""

from __future__ import annotations

from inspect import isawaitable
from typing import Any

from typing_extensions import override


try:
    import redis.asyncio as redis_async
except ImportError:  # pragma: no cover - exercised when dependency is absent
    redis_async = None

from .keys import RecordKeyMapper
from .protocol import RecordStore


def _normalize_string(value: str | bytes | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode()
    return value


class RedisRecordStore(RecordStore):
    """Record store over ``redis.asyncio``.

    Records of an entity live in the hash ``<namespace>:<entity>``, one field
    per identity.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        namespace: str = "form_binder",
        *,
        client: Any | None = None,
    ) -> None:
        """Create a store from URL or an injected async client.

        Parameters
        ----------
        url
            Redis connection URL used when ``client`` is not provided.
        namespace
            Prefix of every hash key written by this store.
        client
            Optional injected client with ``hget/hset/hdel/hkeys/aclose`` API.
        """
        super().__init__()
        self._url = url
        self._keys = RecordKeyMapper(namespace)
        if client is not None:
            self._client = client
            return

        if redis_async is None:
            msg = "redis dependency is required for RedisRecordStore; install with `pip install form-binder[redis]`"
            raise RuntimeError(msg)

        self._client = redis_async.from_url(url, decode_responses=True)

    @override
    async def fetch(self, entity: str, identity: str) -> str | None:
        """Return the raw JSON record, or None when there is none."""
        return _normalize_string(await self._client.hget(self._keys.entity_key(entity), identity))

    @override
    async def store(self, entity: str, identity: str, record: str) -> None:
        """Insert or replace the raw JSON record."""
        await self._client.hset(self._keys.entity_key(entity), identity, record)

    @override
    async def remove(self, entity: str, identity: str) -> None:
        """Remove the record if present."""
        await self._client.hdel(self._keys.entity_key(entity), identity)

    @override
    async def identities(self, entity: str) -> list[str]:
        """List the identities stored for entity, sorted."""
        fields = await self._client.hkeys(self._keys.entity_key(entity))
        return sorted(name for name in (_normalize_string(field) for field in fields) if name is not None)

    @override
    async def close(self) -> None:
        """Release client resources."""
        close_method = getattr(self._client, "aclose", None)
        if close_method is None:
            close_method = getattr(self._client, "close", None)
        if close_method is None:
            return

        maybe_awaitable = close_method()
        if isawaitable(maybe_awaitable):
            await maybe_awaitable
