"""NATS JetStream KV record store."""

from __future__ import annotations

from typing import Any

from typing_extensions import override


try:
    import nats as nats_module
except ImportError:  # pragma: no cover - exercised when dependency is absent
    nats_module = None

from .keys import RecordKeyMapper
from .protocol import RecordStore


_NOT_FOUND_ERROR_NAMES = {"BucketNotFoundError", "KeyDeletedError", "KeyNotFoundError", "NoKeysError"}


def _is_not_found_error(error: Exception) -> bool:
    return error.__class__.__name__ in _NOT_FOUND_ERROR_NAMES


class NatsRecordStore(RecordStore):
    """Record store over a NATS JetStream KV bucket.

    Records are stored under ``<namespace>.<entity>.<identity>``. The store
    uses an existing bucket by default; set ``create_bucket=True`` to allow
    creating it when missing.
    """

    def __init__(
        self,
        url: str = "nats://nats:4222",
        bucket: str = "form_binder",
        namespace: str = "records",
        *,
        client: Any | None = None,
        create_bucket: bool = False,
    ) -> None:
        """Create a store using a NATS URL or injected client.

        Parameters
        ----------
        url
            NATS server URL used when ``client`` is not provided.
        bucket
            JetStream KV bucket name.
        namespace
            First token of every record key.
        client
            Optional injected connected NATS client with ``jetstream`` API.
        create_bucket
            When True, creates bucket if missing. Defaults to False.
        """
        super().__init__()
        self._url = url
        self._bucket_name = bucket
        self._keys = RecordKeyMapper(namespace, sep=".")
        self._client = client
        self._create_bucket = create_bucket
        self._kv: Any | None = None

    async def _ensure_kv(self) -> Any:
        if self._kv is not None:
            return self._kv

        if self._client is None:
            if nats_module is None:
                msg = "nats-py dependency is required for NatsRecordStore; install with `pip install form-binder[nats]`"
                raise RuntimeError(msg)
            self._client = await nats_module.connect(servers=[self._url])

        jetstream = self._client.jetstream()

        try:
            self._kv = await jetstream.key_value(self._bucket_name)
        except Exception as error:
            if _is_not_found_error(error) and self._create_bucket:
                self._kv = await jetstream.create_key_value(bucket=self._bucket_name)
            else:
                msg = (
                    f"jetstream KV bucket '{self._bucket_name}' is not available; "
                    "create it first or initialize with create_bucket=True"
                )
                raise RuntimeError(msg) from error

        return self._kv

    @override
    async def fetch(self, entity: str, identity: str) -> str | None:
        """Return the raw JSON record, or None when there is none."""
        kv = await self._ensure_kv()
        try:
            entry = await kv.get(self._keys.record_key(entity, identity))
        except Exception as error:
            if _is_not_found_error(error):
                return None
            raise

        value = entry.value
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode()
        return value

    @override
    async def store(self, entity: str, identity: str, record: str) -> None:
        """Insert or replace the raw JSON record."""
        kv = await self._ensure_kv()
        await kv.put(self._keys.record_key(entity, identity), record.encode())

    @override
    async def remove(self, entity: str, identity: str) -> None:
        """Remove the record if present."""
        kv = await self._ensure_kv()
        await kv.delete(self._keys.record_key(entity, identity))

    @override
    async def identities(self, entity: str) -> list[str]:
        """List the identities stored for entity, sorted."""
        kv = await self._ensure_kv()
        try:
            keys = await kv.keys()
        except Exception as error:
            if _is_not_found_error(error):
                return []
            raise

        entity_prefix = self._keys.entity_key(entity) + self._keys.sep
        return sorted(self._keys.identity_of(entity, key) for key in keys or () if key.startswith(entity_prefix))

    @override
    async def close(self) -> None:
        """Close NATS client resources."""
        if self._client is None:
            return
        await self._client.close()
