"""Collection binding: repeated scalar values and indexed element groups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from form_binder.errors import ConversionError
from form_binder.schema import PropertyKind

from .frames import UNBOUND
from .result import IssueCode


if TYPE_CHECKING:
    from form_binder.key_mapping import KeyPath
    from form_binder.schema import PropertyDescriptor

    from .binder import _BindingSession
    from .frames import BindingFrame


class CollectionBinder:
    """Assemble a fresh collection for a property and assign it, replacing any existing one.

    Unindexed values (``Reports=3&Reports=4``) come first in submission
    order; indexed groups (``Reports[i]...``) follow in ascending index
    order, whatever order their keys arrived in.
    """

    def __init__(self, session: _BindingSession) -> None:
        super().__init__()
        self._session = session

    def bind(self, frame: BindingFrame, prop: PropertyDescriptor) -> None:
        path = frame.prefix.child(prop.key)
        if prop.element_kind is PropertyKind.SCALAR:
            elements = self._scalar_elements(frame.prefix, prop, path)
        else:
            elements = self._nested_elements(frame, prop, path)

        try:
            collection = prop.container(elements)
        except TypeError as error:
            self._session.record(IssueCode.CONVERSION_ERROR, str(path), f"cannot build {prop.name}: {error}")
            return
        _ = self._session.assign(frame.instance, prop, collection, str(path))

    def _scalar_elements(self, prefix: KeyPath, prop: PropertyDescriptor, path: KeyPath) -> list[Any]:
        index = self._session.index
        raw_items = [(index.key_at(path), raw) for raw in index.values_at(path)]
        for entries in index.indexed_groups(prefix, prop.key).values():
            for entry in entries:
                if len(entry.path) == len(path):
                    raw_items.extend((entry.key, raw) for raw in entry.values)

        converter = self._session.converter
        elements: list[Any] = []
        for key, raw in raw_items:
            try:
                elements.append(converter.convert(raw, prop.value_type))
            except ConversionError as error:
                self._session.record(IssueCode.CONVERSION_ERROR, key, str(error), raw=raw)
        return elements

    def _nested_elements(self, frame: BindingFrame, prop: PropertyDescriptor, path: KeyPath) -> list[Any]:
        session = self._session
        elements: list[Any] = []

        if prop.element_kind is PropertyKind.ENTITY:
            key = session.index.key_at(path)
            for token in session.index.values_at(path):
                if not token:
                    continue
                element = session.entity_from_token(prop.value_type, token, key)
                if element is not UNBOUND:
                    elements.append(element)

        bare = len(path)
        for position, entries in session.index.indexed_groups(frame.prefix, prop.key).items():
            if prop.element_kind is PropertyKind.COMPONENT and all(len(entry.path) == bare for entry in entries):
                # Only bare `Items[i]=value` keys, already reported as misplaced.
                continue
            child = frame.child(prop.value_type, frame.prefix.child(prop.key, position))
            element = session.bind_nested(child)
            if element is not UNBOUND:
                elements.append(element)
        return elements
