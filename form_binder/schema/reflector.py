"""Type schema reflection for dataclasses and pydantic models."""

from __future__ import annotations

import collections.abc
import dataclasses
import logging
import types
from typing import TYPE_CHECKING, Annotated, Any, Literal, NamedTuple, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from .descriptors import FormKey, Identity, PropertyDescriptor, PropertyKind, TypeDescriptor


if TYPE_CHECKING:
    from form_binder.conversion import ScalarConverter


logger = logging.getLogger(__name__)

KeyStyle = Literal["exact", "pascal"]

_LIST_ORIGINS = {
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Iterable,
    collections.abc.Collection,
}
_SET_ORIGINS = {set, collections.abc.Set, collections.abc.MutableSet}
_MAPPING_ORIGINS = {dict, collections.abc.Mapping, collections.abc.MutableMapping}


class _RawField(NamedTuple):
    name: str
    annotation: Any
    metadata: tuple[Any, ...]
    required: bool
    settable: bool


class _Unwrapped(NamedTuple):
    annotation: Any
    metadata: tuple[Any, ...]
    nullable: bool


def pascal_case(name: str) -> str:
    """``first_name`` -> ``FirstName``; ``id`` -> ``Id``."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def _unwrap(annotation: Any) -> _Unwrapped:
    metadata: list[Any] = []
    nullable = False
    while True:
        if get_origin(annotation) is Annotated:
            metadata.extend(annotation.__metadata__)
            annotation = annotation.__origin__
            continue
        if get_origin(annotation) in (Union, types.UnionType):
            args = get_args(annotation)
            remaining = [arg for arg in args if arg is not type(None)]
            if len(remaining) != len(args):
                nullable = True
            if len(remaining) == 1:
                annotation = remaining[0]
                continue
        return _Unwrapped(annotation, tuple(metadata), nullable)


def is_describable(target: object) -> bool:
    """Return True for dataclass types and pydantic model classes."""
    if not isinstance(target, type) or get_origin(target) is not None:
        return False
    return dataclasses.is_dataclass(target) or issubclass(target, BaseModel)


def _is_pydantic(target: type) -> bool:
    return issubclass(target, BaseModel)


def _setter_properties(target: type) -> list[_RawField]:
    found: list[_RawField] = []
    seen: set[str] = set()
    for klass in target.__mro__:
        for name, attribute in vars(klass).items():
            if name in seen or not isinstance(attribute, property):
                continue
            seen.add(name)
            if attribute.fset is None or name.startswith("_"):
                continue
            hints = get_type_hints(attribute.fget, include_extras=True) if attribute.fget else {}
            found.append(_RawField(name, hints.get("return", Any), (), required=False, settable=True))
    return found


def _raw_fields(target: type) -> list[_RawField]:
    if _is_pydantic(target):
        frozen_model = bool(target.model_config.get("frozen"))
        raw = [
            _RawField(
                name,
                info.annotation,
                tuple(info.metadata),
                required=info.is_required(),
                settable=not (frozen_model or info.frozen),
            )
            for name, info in target.model_fields.items()
        ]
    else:
        hints = get_type_hints(target, include_extras=True)
        frozen_class = target.__dataclass_params__.frozen  # type: ignore[attr-defined]
        raw = [
            _RawField(
                item.name,
                hints.get(item.name, item.type),
                (),
                required=item.init
                and item.default is dataclasses.MISSING
                and item.default_factory is dataclasses.MISSING,
                settable=not frozen_class,
            )
            for item in dataclasses.fields(target)
        ]
    return raw + _setter_properties(target)


class SchemaReflector:
    """Describe bindable types as ordered sequences of property descriptors.

    Descriptions are cached on the reflector instance. Classification of a
    property only inspects whether the referenced type has an identity, never
    its full description, so self-referential schemas are safe.
    """

    def __init__(
        self,
        converter: ScalarConverter,
        *,
        identity_name: str = "id",
        key_style: KeyStyle = "exact",
    ) -> None:
        super().__init__()
        self._converter = converter
        self._identity_name = identity_name
        self._key_style = key_style
        self._cache: dict[type, TypeDescriptor] = {}
        self._identity_cache: dict[type, str | None] = {}

    def key_for(self, name: str, metadata: tuple[Any, ...] = ()) -> str:
        """Return the flat key segment naming attribute ``name``."""
        for item in metadata:
            if isinstance(item, FormKey):
                return item.name
        if self._key_style == "pascal":
            return pascal_case(name)
        return name

    def identity_attribute(self, target: type) -> str | None:
        """Return the attribute name of target's identity property, if any."""
        if target in self._identity_cache:
            return self._identity_cache[target]
        found: str | None = None
        conventional: str | None = None
        for raw in _raw_fields(target):
            if any(isinstance(item, Identity) for item in (*raw.metadata, *_unwrap(raw.annotation).metadata)):
                found = raw.name
                break
            if raw.name == self._identity_name:
                conventional = raw.name
        self._identity_cache[target] = found or conventional
        return self._identity_cache[target]

    def kind_of(self, target: Any) -> PropertyKind:
        """Classify a bare (already unwrapped) type."""
        if is_describable(target):
            if self.identity_attribute(target) is not None:
                return PropertyKind.ENTITY
            return PropertyKind.COMPONENT
        if self._converter.supports(target):
            return PropertyKind.SCALAR
        return PropertyKind.UNSUPPORTED

    def describe(self, target: type) -> TypeDescriptor:
        """Return the cached description of target."""
        cached = self._cache.get(target)
        if cached is not None:
            return cached
        if not is_describable(target):
            msg = f"{target!r} is not a dataclass or pydantic model"
            raise TypeError(msg)

        identity_name = self.identity_attribute(target)
        properties: list[PropertyDescriptor] = []
        required: list[PropertyDescriptor] = []
        identity: PropertyDescriptor | None = None
        for raw in _raw_fields(target):
            if raw.name.startswith("_"):
                continue
            prop = self._describe_property(raw, is_identity=raw.name == identity_name)
            if raw.required:
                required.append(prop)
            if prop.is_identity:
                identity = prop
            if not raw.settable:
                logger.debug("skipping read-only property %s.%s", target.__name__, raw.name)
                continue
            properties.append(prop)

        descriptor = TypeDescriptor(target, tuple(properties), identity, tuple(required))
        self._cache[target] = descriptor
        return descriptor

    def _describe_property(self, raw: _RawField, *, is_identity: bool) -> PropertyDescriptor:
        unwrapped = _unwrap(raw.annotation)
        metadata = (*raw.metadata, *unwrapped.metadata)
        annotation = unwrapped.annotation
        key = self.key_for(raw.name, metadata)
        base = {
            "name": raw.name,
            "key": key,
            "declared": raw.annotation,
            "nullable": unwrapped.nullable,
            "is_identity": is_identity,
        }

        origin = get_origin(annotation)
        if annotation in (list, set, frozenset) or origin is not None:
            return self._describe_collection(annotation, origin, base)

        kind = self.kind_of(annotation)
        return PropertyDescriptor(kind=kind, value_type=annotation, **base)

    def _describe_collection(self, annotation: Any, origin: Any, base: dict[str, Any]) -> PropertyDescriptor:
        args = get_args(annotation)
        container_origin = origin or annotation
        element: Any = args[0] if args else str

        container: Any
        if container_origin in _LIST_ORIGINS:
            container = list
        elif container_origin in _SET_ORIGINS:
            container = set
        elif container_origin is frozenset:
            container = frozenset
        elif container_origin is tuple and len(args) == 2 and args[1] is Ellipsis:  # noqa: PLR2004
            container = tuple
        else:
            kind = PropertyKind.UNSUPPORTED
            if container_origin in _MAPPING_ORIGINS:
                logger.debug("mapping property %s is not bindable", base["name"])
            return PropertyDescriptor(kind=kind, value_type=annotation, **base)

        element_unwrapped = _unwrap(element)
        element_type = element_unwrapped.annotation
        element_kind = PropertyKind.UNSUPPORTED if get_origin(element_type) else self.kind_of(element_type)
        kind = PropertyKind.UNSUPPORTED if element_kind is PropertyKind.UNSUPPORTED else PropertyKind.COLLECTION
        return PropertyDescriptor(
            kind=kind,
            value_type=element_type,
            element_kind=element_kind,
            container=container,
            **base,
        )

    def zero_value(self, prop: PropertyDescriptor) -> Any:
        """Return the zero value used for prop when constructing a fresh instance."""
        if prop.kind is PropertyKind.COLLECTION:
            return prop.container()
        if prop.nullable or prop.kind is not PropertyKind.SCALAR:
            return None
        return self._converter.zero_value(prop.value_type)

    def create(self, target: type) -> Any:
        """Construct a fresh, zero-valued instance of target."""
        descriptor = self.describe(target)
        values = {prop.name: self.zero_value(prop) for prop in descriptor.required}
        if _is_pydantic(target):
            return target.model_construct(**values)
        return target(**values)
