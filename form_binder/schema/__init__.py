"""Type schema reflection: which properties a type has and how each is bound."""

from .descriptors import FormKey, Identity, PropertyDescriptor, PropertyKind, TypeDescriptor
from .reflector import SchemaReflector, is_describable, pascal_case


__all__ = [
    "FormKey",
    "Identity",
    "PropertyDescriptor",
    "PropertyKind",
    "SchemaReflector",
    "TypeDescriptor",
    "is_describable",
    "pascal_case",
]
