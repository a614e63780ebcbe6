"""In-memory record store."""

from __future__ import annotations

import asyncio
from typing_extensions import override

from .protocol import RecordStore


class InMemoryRecordStore(RecordStore):
    """Dictionary-backed record store for local development and tests."""

    def __init__(self) -> None:
        super().__init__()
        self._records: dict[str, dict[str, str]] = {}
        self._lock = asyncio.Lock()

    @override
    async def fetch(self, entity: str, identity: str) -> str | None:
        """Return the raw JSON record, or None when there is none."""
        async with self._lock:
            return self._records.get(entity, {}).get(identity)

    @override
    async def store(self, entity: str, identity: str, record: str) -> None:
        """Insert or replace the raw JSON record."""
        async with self._lock:
            self._records.setdefault(entity, {})[identity] = record

    @override
    async def remove(self, entity: str, identity: str) -> None:
        """Remove the record if present."""
        async with self._lock:
            _ = self._records.get(entity, {}).pop(identity, None)

    @override
    async def identities(self, entity: str) -> list[str]:
        """List the identities stored for entity, sorted."""
        async with self._lock:
            return sorted(self._records.get(entity, {}))

    @override
    async def close(self) -> None:
        """Release store resources."""
        return
