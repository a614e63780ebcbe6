"""form-binder - rebuild typed object graphs from flat form data, resolving entities by identity"""

from ._version import version as __version__
from .binding import BindingIssue, BindingResult, FormBinder, IssueCode
from .config import BinderSettings, configure_logging
from .conversion import ScalarConverter
from .errors import (
    BindingFailedError,
    ConversionError,
    FormBinderError,
    IdentityNotFoundError,
    MalformedKeyError,
    UnsupportedPropertyKindError,
)
from .identity import EntityIdentityResolver, IdentityLookup
from .key_mapping import FlatValueSet, KeyPath, Segment, parse_key
from .lookups import InMemoryRepository, StoreBackedRepository
from .schema import FormKey, Identity, PropertyKind, SchemaReflector


__all__ = [
    "BinderSettings",
    "BindingFailedError",
    "BindingIssue",
    "BindingResult",
    "ConversionError",
    "EntityIdentityResolver",
    "FlatValueSet",
    "FormBinder",
    "FormBinderError",
    "FormKey",
    "Identity",
    "IdentityLookup",
    "IdentityNotFoundError",
    "InMemoryRepository",
    "IssueCode",
    "KeyPath",
    "MalformedKeyError",
    "PropertyKind",
    "ScalarConverter",
    "SchemaReflector",
    "Segment",
    "StoreBackedRepository",
    "UnsupportedPropertyKindError",
    "__version__",
    "configure_logging",
    "parse_key",
]
