"""Property descriptors produced by the schema reflector."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class PropertyKind(str, Enum):
    """How a property is bound."""

    SCALAR = "scalar"
    ENTITY = "entity"
    COLLECTION = "collection"
    COMPONENT = "component"  # nested type without identity, never resolved
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class Identity:
    """``Annotated`` marker naming the identity property of an entity type."""


@dataclass(frozen=True, slots=True)
class FormKey:
    """``Annotated`` marker overriding the flat key name of a property."""

    name: str


@dataclass(frozen=True, slots=True)
class PropertyDescriptor:
    """One settable property of a bindable type.

    Attributes:
        name: Attribute name on the instance.
        key: Segment name used in flat keys.
        kind: Binding strategy.
        declared: The declared annotation, as written.
        value_type: Scalar type for SCALAR, target class for ENTITY/COMPONENT,
            element type for COLLECTION.
        element_kind: Kind of the elements of a COLLECTION.
        container: Factory building a COLLECTION from a list of elements.
        nullable: Whether None is an accepted value.
        is_identity: Whether this is the owner's identity property.
    """

    name: str
    key: str
    kind: PropertyKind
    declared: Any
    value_type: Any = None
    element_kind: PropertyKind | None = None
    container: Any = None
    nullable: bool = False
    is_identity: bool = False


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Settable properties of a type in declaration order, plus its identity."""

    target: type
    properties: tuple[PropertyDescriptor, ...] = ()
    identity: PropertyDescriptor | None = None
    required: tuple[PropertyDescriptor, ...] = ()

    @property
    def is_entity(self) -> bool:
        return self.identity is not None

    def get(self, name: str) -> PropertyDescriptor | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None
