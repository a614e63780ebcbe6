"""Exception types raised by the binder and its collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence

    from form_binder.binding.result import BindingIssue


class FormBinderError(Exception):
    """Base class for all form binder errors."""


class MalformedKeyError(FormBinderError, ValueError):
    """A flat key could not be parsed into a key path."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"malformed key {key!r}: {reason}")
        self.key = key
        self.reason = reason


class ConversionError(FormBinderError, ValueError):
    """A raw string could not be converted to the declared scalar type."""

    def __init__(self, raw: str, target: object, reason: str) -> None:
        target_name = getattr(target, "__name__", repr(target))
        super().__init__(f"cannot convert {raw!r} to {target_name}: {reason}")
        self.raw = raw
        self.target = target
        self.reason = reason


class IdentityNotFoundError(FormBinderError, LookupError):
    """A supplied identity has no backing record."""

    def __init__(self, entity_type: type, identity: object) -> None:
        super().__init__(f"no {entity_type.__name__} with identity {identity!r}")
        self.entity_type = entity_type
        self.identity = identity


class UnsupportedPropertyKindError(FormBinderError, TypeError):
    """A declared property type cannot be classified by the reflector."""

    def __init__(self, owner: type, name: str, declared: object) -> None:
        super().__init__(f"{owner.__name__}.{name} has unsupported type {declared!r}")
        self.owner = owner
        self.name = name
        self.declared = declared


class BindingFailedError(FormBinderError):
    """Raised by ``BindingResult.unwrap`` when issues were recorded."""

    def __init__(self, issues: Sequence[BindingIssue]) -> None:
        summary = "; ".join(f"{issue.key}: {issue.message}" for issue in issues)
        super().__init__(f"binding failed with {len(issues)} issue(s): {summary}")
        self.issues = tuple(issues)
