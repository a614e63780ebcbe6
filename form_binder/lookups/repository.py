"""Identity-lookup collaborators: an in-memory repository and a store-backed one."""

from __future__ import annotations

import datetime as dt
import json
import logging
import threading
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from form_binder.config.settings import BinderSettings
from form_binder.conversion import ScalarConverter
from form_binder.schema import PropertyKind, SchemaReflector

from .bridge import AsyncLoopBridge


if TYPE_CHECKING:
    from collections.abc import Callable

    from form_binder.schema import PropertyDescriptor

    from .protocol import RecordStore


logger = logging.getLogger(__name__)


def _reflector_for(settings: BinderSettings | None, converter: ScalarConverter | None) -> SchemaReflector:
    settings = settings or BinderSettings()
    return SchemaReflector(
        converter or ScalarConverter(),
        identity_name=settings.identity_name,
        key_style=settings.key_style,
    )


class InMemoryRepository:
    """Thread-safe map of living instances keyed by ``(type, identity)``."""

    def __init__(self, *, settings: BinderSettings | None = None) -> None:
        super().__init__()
        self._reflector = _reflector_for(settings, None)
        self._items: dict[tuple[type, Any], Any] = {}
        self._lock = threading.Lock()

    def _identity(self, instance: Any) -> Any:
        name = self._reflector.identity_attribute(type(instance))
        if name is None:
            msg = f"{type(instance).__name__} has no identity property"
            raise TypeError(msg)
        return getattr(instance, name)

    def add(self, *instances: Any) -> None:
        """Register instances under their current identity."""
        with self._lock:
            for instance in instances:
                self._items[type(instance), self._identity(instance)] = instance

    def remove(self, entity_type: type, identity: Any) -> bool:
        """Forget the instance; return False when it was not registered."""
        with self._lock:
            return self._items.pop((entity_type, identity), None) is not None

    def get_by_identity(self, entity_type: type, identity: Any) -> Any | None:
        """Return the registered instance, or None."""
        with self._lock:
            return self._items.get((entity_type, identity))

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal, dt.date, dt.time)):
        return value.isoformat() if isinstance(value, (dt.date, dt.time)) else str(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(item) for item in value]
    return value


class StoreBackedRepository:
    """Synchronous identity lookup over an asynchronous ``RecordStore``.

    Store calls run on a dedicated event-loop thread so the binder can keep
    its blocking contract. Records are JSON objects keyed by the property
    key names of the entity type. Materialised instances are kept in an
    identity map, so one ``(type, identity)`` always yields the same
    living instance until ``forget`` or ``clear`` is called.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        settings: BinderSettings | None = None,
        converter: ScalarConverter | None = None,
        json_encoder: Callable[[Any], str] = json.dumps,
        json_decoder: Callable[[str], Any] = json.loads,
    ) -> None:
        super().__init__()
        self._store = store
        self._converter = converter or ScalarConverter()
        self._reflector = _reflector_for(settings, self._converter)
        self._json_encoder = json_encoder
        self._json_decoder = json_decoder
        self._identity_map: dict[tuple[type, str], Any] = {}
        self._lock = threading.Lock()
        self._bridge = AsyncLoopBridge()

    @staticmethod
    def entity_name(entity_type: type) -> str:
        return entity_type.__name__

    def get_by_identity(self, entity_type: type, identity: Any) -> Any | None:
        """Return the living instance for identity, loading it from the store on first use."""
        token = str(identity)
        with self._lock:
            cached = self._identity_map.get((entity_type, token))
        if cached is not None:
            return cached

        raw = self._bridge.run(self._store.fetch(self.entity_name(entity_type), token))
        if raw is None:
            return None
        instance = self.materialize(entity_type, self._json_decoder(raw))
        with self._lock:
            return self._identity_map.setdefault((entity_type, token), instance)

    def save(self, instance: Any) -> None:
        """Write instance's scalar and scalar-collection properties to the store."""
        entity_type = type(instance)
        descriptor = self._reflector.describe(entity_type)
        if descriptor.identity is None:
            msg = f"{entity_type.__name__} has no identity property"
            raise TypeError(msg)

        record: dict[str, Any] = {}
        for prop in (descriptor.identity, *descriptor.properties):
            if prop.kind is PropertyKind.SCALAR or (
                prop.kind is PropertyKind.COLLECTION and prop.element_kind is PropertyKind.SCALAR
            ):
                record[prop.key] = _plain(getattr(instance, prop.name))

        token = str(getattr(instance, descriptor.identity.name))
        self._bridge.run(self._store.store(self.entity_name(entity_type), token, self._json_encoder(record)))
        with self._lock:
            self._identity_map[entity_type, token] = instance

    def forget(self, entity_type: type, identity: Any) -> None:
        with self._lock:
            _ = self._identity_map.pop((entity_type, str(identity)), None)

    def clear(self) -> None:
        with self._lock:
            self._identity_map.clear()

    def materialize(self, entity_type: type, record: dict[str, Any]) -> Any:
        """Build an instance of entity_type from a decoded JSON record.

        Entity-valued properties are left unset; unknown record keys are ignored.
        """
        descriptor = self._reflector.describe(entity_type)
        instance = self._reflector.create(entity_type)
        for prop in descriptor.properties:
            if prop.key not in record:
                continue
            value = record[prop.key]
            if prop.kind is PropertyKind.SCALAR:
                setattr(instance, prop.name, self._scalar(value, prop.value_type, nullable=prop.nullable))
            elif prop.kind is PropertyKind.COLLECTION and prop.element_kind is PropertyKind.SCALAR:
                items = [self._scalar(item, prop.value_type, nullable=True) for item in value or ()]
                setattr(instance, prop.name, prop.container(items))
            else:
                logger.debug("record for %s: skipping %s property %s", entity_type.__name__, prop.kind.value, prop.key)
        return instance

    def _scalar(self, value: Any, target: type, *, nullable: bool) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            return self._converter.convert(value, target, nullable=nullable)
        if type(value) is target:
            return value
        return self._converter.convert(str(value), target, nullable=nullable)

    def close(self) -> None:
        """Close the record store and stop the bridge thread."""
        self._bridge.run(self._store.close())
        self._bridge.close()
