"""Conversion of raw submitted strings to declared scalar types."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import TYPE_CHECKING, Any, get_origin
from uuid import UUID

from form_binder.errors import ConversionError


if TYPE_CHECKING:
    from collections.abc import Callable


_TRUE_WORDS = frozenset({"true", "on", "yes", "1"})
_FALSE_WORDS = frozenset({"false", "off", "no", "0"})


def _to_bool(raw: str) -> bool:
    # A checked checkbox posted next to its hidden companion arrives as "true,false".
    word = raw.split(",", 1)[0].strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    msg = f"{raw!r} is not a boolean"
    raise ValueError(msg)


def _is_plain_class(target: object) -> bool:
    return isinstance(target, type) and get_origin(target) is None


def _to_int(raw: str) -> int:
    return int(raw.strip())


def _to_decimal(raw: str) -> Decimal:
    try:
        return Decimal(raw.strip())
    except InvalidOperation as error:
        msg = f"{raw!r} is not a decimal"
        raise ValueError(msg) from error


_ZERO_VALUES: dict[type, Any] = {
    str: "",
    int: 0,
    float: 0.0,
    bool: False,
    Decimal: Decimal(0),
    UUID: UUID(int=0),
}


class ScalarConverter:
    """Registry of string-to-scalar conversion functions keyed by target type."""

    def __init__(self) -> None:
        super().__init__()
        self._converters: dict[type, Callable[[str], Any]] = {
            str: str,
            int: _to_int,
            float: float,
            bool: _to_bool,
            Decimal: _to_decimal,
            UUID: UUID,
            dt.date: dt.date.fromisoformat,
            dt.datetime: dt.datetime.fromisoformat,
            dt.time: dt.time.fromisoformat,
        }

    def register(self, target: type, func: Callable[[str], Any]) -> None:
        """Register or replace the converter for target."""
        self._converters[target] = func

    def supports(self, target: object) -> bool:
        """Return True when target is a scalar type this converter can produce."""
        if not _is_plain_class(target):
            return False
        return target in self._converters or issubclass(target, Enum)

    def zero_value(self, target: object) -> Any:
        """Return the zero value of target, or None when it has none."""
        if isinstance(target, type):
            return _ZERO_VALUES.get(target)
        return None

    def is_zero(self, value: Any, target: object) -> bool:
        """Return True when value equals target's zero value."""
        zero = self.zero_value(target)
        return zero is not None and value == zero

    def convert(self, raw: str, target: type, *, nullable: bool = False) -> Any:
        """Convert raw to target, raising ``ConversionError`` on failure.

        The empty string maps to ``""`` for ``str``, to the all-zero UUID for
        ``UUID`` and to None for nullable targets; for any other type it is an
        error.
        """
        if raw == "":
            if target is str:
                return ""
            if target is UUID:
                return UUID(int=0)
            if nullable:
                return None
            raise ConversionError(raw, target, "a value is required")

        if _is_plain_class(target) and issubclass(target, Enum):
            return self._convert_enum(raw, target)

        func = self._converters.get(target)
        if func is None:
            raise ConversionError(raw, target, "no converter registered")
        try:
            return func(raw)
        except (TypeError, ValueError) as error:
            raise ConversionError(raw, target, str(error)) from error

    @staticmethod
    def _convert_enum(raw: str, target: type[Enum]) -> Enum:
        for member in target:
            if str(member.value) == raw:
                return member
        try:
            return target[raw]
        except KeyError as error:
            raise ConversionError(raw, target, "not a member") from error
