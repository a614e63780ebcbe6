import datetime as dt
from decimal import Decimal
from enum import Enum
from uuid import UUID

import pytest

from form_binder.conversion import ScalarConverter
from form_binder.errors import ConversionError


class Color(Enum):
    RED = "red"
    GREEN = "green"


@pytest.fixture
def converter() -> ScalarConverter:
    return ScalarConverter()


@pytest.mark.parametrize(
    ("raw", "target", "expected"),
    [
        ("Michael", str, "Michael"),
        ("", str, ""),
        ("42", int, 42),
        (" 7 ", int, 7),
        ("1.5", float, 1.5),
        ("19.99", Decimal, Decimal("19.99")),
        ("on", bool, True),
        ("False", bool, False),
        ("true,false", bool, True),
        ("2024-01-31", dt.date, dt.date(2024, 1, 31)),
        ("2024-01-31T10:15:00", dt.datetime, dt.datetime(2024, 1, 31, 10, 15)),
        ("10:15", dt.time, dt.time(10, 15)),
        ("red", Color, Color.RED),
        ("GREEN", Color, Color.GREEN),
        ("12345678-1234-5678-1234-567812345678", UUID, UUID("12345678-1234-5678-1234-567812345678")),
    ],
)
def test_convert_supported_scalars(converter: ScalarConverter, raw: str, target: type, expected: object) -> None:
    assert converter.convert(raw, target) == expected


def test_empty_string_maps_to_zero_uuid(converter: ScalarConverter) -> None:
    assert converter.convert("", UUID) == UUID(int=0)


def test_empty_string_for_nullable_target_is_none(converter: ScalarConverter) -> None:
    assert converter.convert("", int, nullable=True) is None


@pytest.mark.parametrize(
    ("raw", "target"),
    [("", int), ("abc", int), ("maybe", bool), ("1.2.3", Decimal), ("not-a-uuid", UUID), ("blue", Color)],
)
def test_convert_failures_raise_conversion_error(converter: ScalarConverter, raw: str, target: type) -> None:
    with pytest.raises(ConversionError) as excinfo:
        _ = converter.convert(raw, target)
    assert excinfo.value.raw == raw
    assert excinfo.value.target is target


def test_unregistered_type_is_not_supported(converter: ScalarConverter) -> None:
    assert not converter.supports(list)
    assert not converter.supports(list[int])
    assert converter.supports(Color)
    with pytest.raises(ConversionError, match="no converter registered"):
        _ = converter.convert("x", bytes)


def test_register_custom_converter(converter: ScalarConverter) -> None:
    converter.register(bytes, str.encode)
    assert converter.supports(bytes)
    assert converter.convert("abc", bytes) == b"abc"


def test_zero_values(converter: ScalarConverter) -> None:
    assert converter.zero_value(int) == 0
    assert converter.zero_value(UUID) == UUID(int=0)
    assert converter.zero_value(dt.date) is None
    assert converter.is_zero(UUID(int=0), UUID)
    assert converter.is_zero(0, int)
    assert not converter.is_zero(3, int)
    assert not converter.is_zero(None, dt.date)
