"""Entity identity resolution against an injected lookup collaborator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable


if TYPE_CHECKING:
    from form_binder.conversion import ScalarConverter


logger = logging.getLogger(__name__)


@runtime_checkable
class IdentityLookup(Protocol):
    """Get-by-identity capability supplied by the persistence layer.

    Implementations must be safe for concurrent use when the binder is
    shared across threads.
    """

    def get_by_identity(self, entity_type: type, identity: Any) -> Any | None:
        """Return the living instance of entity_type with identity, or None."""
        ...


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    NO_IDENTITY = "no_identity"
    DETACHED = "detached"  # identity supplied, no lookup configured


@dataclass(frozen=True, slots=True)
class Resolution:
    status: ResolutionStatus
    identity: Any = None
    instance: Any = None


class EntityIdentityResolver:
    """Turn a raw identity token into an existing entity, when one is supplied."""

    def __init__(self, converter: ScalarConverter, lookup: IdentityLookup | None = None) -> None:
        super().__init__()
        self._converter = converter
        self._lookup = lookup

    @property
    def enabled(self) -> bool:
        return self._lookup is not None

    def resolve(self, entity_type: type, identity_type: type, token: str | None) -> Resolution:
        """Resolve token to an instance of entity_type.

        Raises ``ConversionError`` when the token does not parse.
        """
        return self.lookup(entity_type, identity_type, self.parse(identity_type, token))

    def parse(self, identity_type: type, token: str | None) -> Any:
        """Convert token to an identity value; None when no token was supplied.

        The empty token converts like any blank value: the all-zero UUID for
        UUID identities, None for types without an empty form.
        """
        if token is None:
            return None
        return self._converter.convert(token, identity_type, nullable=True)

    def lookup(self, entity_type: type, identity_type: type, identity: Any) -> Resolution:
        """Look identity up; None or the identity type's zero value means no identity.

        Exceptions raised by the lookup collaborator propagate.
        """
        if identity is None or self._converter.is_zero(identity, identity_type):
            return Resolution(ResolutionStatus.NO_IDENTITY, identity)

        if self._lookup is None:
            return Resolution(ResolutionStatus.DETACHED, identity)

        instance = self._lookup.get_by_identity(entity_type, identity)
        if instance is None:
            logger.debug("identity lookup missed for %s %r", entity_type.__name__, identity)
            return Resolution(ResolutionStatus.NOT_FOUND, identity)
        return Resolution(ResolutionStatus.RESOLVED, identity, instance)
