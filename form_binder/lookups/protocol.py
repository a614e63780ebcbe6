"""Record store interface used behind store-backed repositories."""

from __future__ import annotations

from abc import ABC, abstractmethod


class RecordStore(ABC):
    """Async store of JSON entity records keyed by entity name and identity."""

    @abstractmethod
    async def fetch(self, entity: str, identity: str) -> str | None:
        """Return the raw JSON record, or None when there is none."""

    @abstractmethod
    async def store(self, entity: str, identity: str, record: str) -> None:
        """Insert or replace the raw JSON record."""

    @abstractmethod
    async def remove(self, entity: str, identity: str) -> None:
        """Remove the record if present."""

    @abstractmethod
    async def identities(self, entity: str) -> list[str]:
        """List the identities stored for entity, sorted."""

    @abstractmethod
    async def close(self) -> None:
        """Close any store resources."""
