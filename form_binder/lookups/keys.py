"""Namespaced store keys for entity records."""

from __future__ import annotations


class RecordKeyMapper:
    """Map between ``<namespace><sep><entity>[<sep><identity>]`` store keys and their parts."""

    def __init__(self, namespace: str, sep: str = ":") -> None:
        super().__init__()
        if not namespace:
            msg = "namespace must not be empty"
            raise ValueError(msg)
        if not sep:
            msg = "sep must not be empty"
            raise ValueError(msg)
        if sep in namespace:
            msg = "namespace must not contain separator"
            raise ValueError(msg)

        self.namespace = namespace
        self.sep = sep
        self.prefix = f"{namespace}{sep}"

    def _check(self, part: str, label: str) -> None:
        if not part:
            msg = f"{label} must not be empty"
            raise ValueError(msg)
        if self.sep in part:
            msg = f"{label} must not contain separator"
            raise ValueError(msg)

    def entity_key(self, entity: str) -> str:
        """Return the key grouping every record of entity."""
        self._check(entity, "entity")
        return self.prefix + entity

    def record_key(self, entity: str, identity: str) -> str:
        """Return the key of one record."""
        self._check(identity, "identity")
        return self.entity_key(entity) + self.sep + identity

    def identity_of(self, entity: str, key: str) -> str:
        """Extract the identity from a record key of entity."""
        entity_prefix = self.entity_key(entity) + self.sep
        if not key.startswith(entity_prefix):
            msg = f"key does not belong to entity {entity!r}: {key}"
            raise ValueError(msg)
        identity = key.removeprefix(entity_prefix)
        if not identity or self.sep in identity:
            msg = f"invalid record key: {key}"
            raise ValueError(msg)
        return identity
