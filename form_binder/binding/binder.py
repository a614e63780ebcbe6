"""Binder orchestrator: rebuild a typed object graph from flat form values."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from form_binder.config.settings import BinderSettings
from form_binder.conversion import ScalarConverter
from form_binder.errors import ConversionError, IdentityNotFoundError, UnsupportedPropertyKindError
from form_binder.identity import EntityIdentityResolver, ResolutionStatus
from form_binder.key_mapping import ROOT, FlatValueSet, KeyIndex, parse_key
from form_binder.schema import PropertyKind, SchemaReflector

from .collections import CollectionBinder
from .frames import UNBOUND, BindingFrame, RecursionGuard
from .result import BindingIssue, BindingResult, IssueCode


if TYPE_CHECKING:
    from collections.abc import Sequence

    from form_binder.identity import IdentityLookup
    from form_binder.key_mapping import KeyPath
    from form_binder.schema import PropertyDescriptor


logger = logging.getLogger(__name__)


class FormBinder:
    """Bind flat key/value multimaps onto dataclass or pydantic object graphs.

    The identity lookup is injected; without one, entities are always
    constructed fresh and identity tokens are assigned to their identity
    property. A binder holds no per-call state and may be shared across
    threads when its lookup is thread-safe.
    """

    def __init__(
        self,
        lookup: IdentityLookup | None = None,
        *,
        settings: BinderSettings | None = None,
        converter: ScalarConverter | None = None,
    ) -> None:
        super().__init__()
        self.settings = settings or BinderSettings()
        self.converter = converter or ScalarConverter()
        self.reflector = SchemaReflector(
            self.converter,
            identity_name=self.settings.identity_name,
            key_style=self.settings.key_style,
        )
        self.resolver = EntityIdentityResolver(self.converter, lookup)

    def bind(
        self,
        target: type,
        values: FlatValueSet | Mapping[str, str | Sequence[str]],
        prefix: str = "",
    ) -> BindingResult:
        """Build one instance of target from the keys under prefix.

        Raises ``MalformedKeyError`` when prefix itself is malformed, or for
        the first malformed key when ``strict_keys`` is set.
        """
        if not isinstance(values, FlatValueSet):
            values = FlatValueSet.from_mapping(values)
        index = KeyIndex(values)
        if index.malformed and self.settings.strict_keys:
            raise index.malformed[0]

        session = _BindingSession(self, index)
        instance = session.bind_root(target, parse_key(prefix))
        logger.debug(
            "bound %s from %d key(s) with %d issue(s)",
            target.__name__,
            len(index.entries),
            len(session.issues),
        )
        return BindingResult(instance=instance, issues=tuple(session.issues))


class _BindingSession:
    """Call-local state of one bind: parsed keys, issues and the recursion guard."""

    def __init__(self, binder: FormBinder, index: KeyIndex) -> None:
        super().__init__()
        self.settings = binder.settings
        self.converter = binder.converter
        self.reflector = binder.reflector
        self.resolver = binder.resolver
        self.index = index
        self.issues: list[BindingIssue] = []
        self.guard = RecursionGuard(self.settings.max_depth)
        self.collections = CollectionBinder(self)
        for error in index.malformed:
            self.record(IssueCode.MALFORMED_KEY, error.key, str(error))

    def record(self, code: IssueCode, key: str, message: str, **detail: Any) -> None:
        logger.debug("binding issue %s at %s: %s", code.value, key, message)
        self.issues.append(BindingIssue(code=code, key=key, message=message, detail=detail))

    def bind_root(self, target: type, prefix: KeyPath) -> Any:
        if len(prefix) and self.settings.fallback_to_empty_prefix and not self.index.has_prefix(prefix):
            logger.debug("no keys under %s, falling back to the empty prefix", prefix)
            prefix = ROOT

        frame = BindingFrame(target, prefix)
        descriptor = self.reflector.describe(target)
        with self.guard.entered(frame):
            if descriptor.is_entity and self.settings.resolve_root_entity and self.resolver.enabled:
                instance = self._bind_entity(frame)
                return None if instance is UNBOUND else instance
            frame.instance = self.reflector.create(target)
            self.populate(frame)
        return frame.instance

    def populate(self, frame: BindingFrame, *, skip_identity: bool = False) -> None:
        """Bind every declared property of frame's type that has matching keys.

        Keys naming a property in a shape it cannot take (``Name[0]`` on a
        scalar, ``Manager[0].Name`` on a single entity) are recorded as
        misplaced and never acted on.
        """
        descriptor = self.reflector.describe(frame.target)
        depth = len(frame.prefix)
        for prop in descriptor.properties:
            entries = self.index.under(frame.prefix, prop.key)
            if not entries or (prop.is_identity and skip_identity):
                continue

            fitting = 0
            for entry in entries:
                if _fits(prop, entry.path, depth):
                    fitting += 1
                else:
                    self.record(
                        IssueCode.MISPLACED_KEY,
                        entry.key,
                        f"key does not fit {prop.kind.value} property {frame.target.__name__}.{prop.name}",
                    )
            if not fitting:
                continue

            if prop.kind is PropertyKind.SCALAR:
                self._bind_scalar(frame, prop)
            elif prop.kind in (PropertyKind.ENTITY, PropertyKind.COMPONENT):
                path = frame.prefix.child(prop.key)
                child = self.bind_nested(frame.child(prop.value_type, path))
                if child is not UNBOUND:
                    _ = self.assign(frame.instance, prop, child, str(path))
            elif prop.kind is PropertyKind.COLLECTION:
                self.collections.bind(frame, prop)
            else:
                error = UnsupportedPropertyKindError(frame.target, prop.name, prop.declared)
                self.record(IssueCode.UNSUPPORTED_PROPERTY_KIND, str(frame.prefix.child(prop.key)), str(error))

    def assign(self, instance: Any, prop: PropertyDescriptor, value: Any, key: str, **detail: Any) -> bool:
        """Set prop on instance, recording a rejected value instead of raising."""
        try:
            setattr(instance, prop.name, value)
        except (TypeError, ValueError) as error:
            # pydantic's ValidationError (validate_assignment) is a ValueError.
            self.record(IssueCode.CONVERSION_ERROR, key, f"{prop.name} rejected the value: {error}", **detail)
            return False
        return True

    def _bind_scalar(self, frame: BindingFrame, prop: PropertyDescriptor) -> None:
        path = frame.prefix.child(prop.key)
        submitted = self.index.values_at(path)
        if not submitted:
            return
        raw = submitted[0]
        key = self.index.key_at(path)
        try:
            value = self.converter.convert(raw, prop.value_type, nullable=prop.nullable)
        except ConversionError as error:
            if prop.is_identity and raw == "":
                # A blank identity means "no identity supplied".
                return
            self.record(IssueCode.CONVERSION_ERROR, key, str(error), raw=raw)
            return
        _ = self.assign(frame.instance, prop, value, key, raw=raw)

    def bind_nested(self, frame: BindingFrame) -> Any:
        """Open a child frame for an entity or component; UNBOUND when refused or unresolved."""
        refusal = self.guard.refusal(frame)
        if refusal is not None:
            self.record(IssueCode.RECURSION_LIMIT, str(frame.prefix), refusal)
            return UNBOUND

        with self.guard.entered(frame):
            if self.reflector.describe(frame.target).is_entity:
                return self._bind_entity(frame)
            frame.instance = self.reflector.create(frame.target)
            self.populate(frame)
            return frame.instance

    def _identity_token(self, prefix: KeyPath, identity_key: str) -> tuple[str | None, KeyPath]:
        identity_path = prefix.child(identity_key)
        submitted = self.index.values_at(identity_path)
        if submitted:
            return submitted[0], identity_path
        # Shorthand: ``Employee.Manager=12`` names the manager by identity.
        submitted = self.index.values_at(prefix)
        if submitted:
            return submitted[0], prefix
        return None, identity_path

    def _bind_entity(self, frame: BindingFrame) -> Any:
        identity = self.reflector.describe(frame.target).identity
        if identity is None:
            msg = f"{frame.target.__name__} has no identity property"
            raise TypeError(msg)

        token, token_path = self._identity_token(frame.prefix, identity.key)
        instance = self.entity_from_token(frame.target, token, self.index.key_at(token_path))
        if instance is UNBOUND:
            return UNBOUND
        frame.instance = instance
        self.populate(frame, skip_identity=True)
        return frame.instance

    def entity_from_token(self, target: type, token: str | None, key: str) -> Any:
        """Resolve token to a living instance, or build a fresh one when no identity is supplied.

        Only a token that fails to parse is recorded against the key; errors
        raised while looking the identity up propagate.
        """
        descriptor = self.reflector.describe(target)
        identity = descriptor.identity
        if identity is None:
            msg = f"{target.__name__} has no identity property"
            raise TypeError(msg)

        try:
            value = self.resolver.parse(identity.value_type, token)
        except ConversionError as error:
            self.record(IssueCode.CONVERSION_ERROR, key, str(error), raw=token)
            return UNBOUND
        resolution = self.resolver.lookup(target, identity.value_type, value)

        if resolution.status is ResolutionStatus.RESOLVED:
            return resolution.instance
        if resolution.status is ResolutionStatus.NOT_FOUND:
            self.record(
                IssueCode.IDENTITY_NOT_FOUND,
                key,
                str(IdentityNotFoundError(target, resolution.identity)),
                entity=target.__name__,
                identity=str(resolution.identity),
            )
            return UNBOUND

        instance = self.reflector.create(target)
        settable = descriptor.get(identity.name)
        if resolution.identity is not None and settable is not None:
            _ = self.assign(instance, settable, resolution.identity, key, raw=token)
        return instance


def _fits(prop: PropertyDescriptor, path: KeyPath, depth: int) -> bool:
    """Return True when a key below ``path[:depth]`` has a shape prop can take."""
    indexed = path[depth].index is not None
    exact = len(path) == depth + 1
    if prop.kind is PropertyKind.SCALAR:
        return exact and not indexed
    if prop.kind is PropertyKind.ENTITY:
        return not indexed
    if prop.kind is PropertyKind.COMPONENT:
        return not indexed and not exact
    if prop.kind is PropertyKind.COLLECTION:
        if prop.element_kind is PropertyKind.SCALAR:
            return exact
        if exact:
            return prop.element_kind is PropertyKind.ENTITY
        return indexed
    return True
