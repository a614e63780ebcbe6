"""Minimal example resolving entities through a Redis-compatible record store."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from form_binder import BinderSettings, FormBinder, StoreBackedRepository
from form_binder.lookups import RedisRecordStore


@dataclass
class Territory:
    id: UUID | None = None
    name: str = ""


@dataclass
class Region:
    id: int = 0
    name: str = ""
    territory: Territory | None = None


def main() -> None:
    """Save a territory, then bind a region form that refers to it by identity."""
    settings = BinderSettings(key_style="pascal")
    repository = StoreBackedRepository(RedisRecordStore(url="redis://redis:6379/0"), settings=settings)
    try:
        territory = Territory(id=UUID("2f3c0c8e-9b6a-4a3e-8f0c-6a1f0d2b9e11"), name="Someplace, USA")
        repository.save(territory)
        repository.clear()

        binder = FormBinder(repository, settings=settings)
        values = {"Region.Name": "West", "Region.Territory.Id": str(territory.id)}
        region = binder.bind(Region, values, prefix="Region").unwrap()
        print(f"{region=}")
        assert region.territory is repository.get_by_identity(Territory, territory.id)  # noqa: S101
    finally:
        repository.close()


if __name__ == "__main__":
    main()
