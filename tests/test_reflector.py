from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Annotated, ClassVar
from uuid import UUID

import pytest
from pydantic import BaseModel

from form_binder.conversion import ScalarConverter
from form_binder.schema import FormKey, Identity, PropertyKind, SchemaReflector, pascal_case


@dataclass
class Employee:
    id: int = 0
    name: str = ""
    manager: Employee | None = None
    reports: list[Employee] = field(default_factory=list)
    registry: ClassVar[str] = "employees"

    @property
    def display_name(self) -> str:
        return self.name.title()


@dataclass
class Address:
    city: str = ""
    postcode: str | None = None


@dataclass
class Territory:
    code: Annotated[str, Identity()] = ""
    title: Annotated[str, FormKey("Name")] = ""
    tags: set[str] = field(default_factory=set)
    scores: tuple[int, ...] = ()
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass
class Invoice:
    id: UUID
    number: str
    total: Decimal
    lines: list[str]
    address: Address | None
    paid: bool


@dataclass(frozen=True)
class Money:
    amount: Decimal = Decimal(0)
    currency: str = "EUR"


@dataclass
class Account:
    id: int = 0
    _email: str = ""

    @property
    def email(self) -> str:
        return self._email

    @email.setter
    def email(self, value: str) -> None:
        self._email = value.lower()


class Customer(BaseModel):
    id: int = 0
    name: str = ""
    referrer: Customer | None = None
    nicknames: list[str] = []


class FrozenCustomer(BaseModel):
    model_config = {"frozen": True}

    id: int = 0
    name: str = ""


@pytest.fixture
def reflector() -> SchemaReflector:
    return SchemaReflector(ScalarConverter())


def test_describe_classifies_properties_in_declaration_order(reflector: SchemaReflector) -> None:
    descriptor = reflector.describe(Employee)
    assert [prop.name for prop in descriptor.properties] == ["id", "name", "manager", "reports"]
    assert [prop.kind for prop in descriptor.properties] == [
        PropertyKind.SCALAR,
        PropertyKind.SCALAR,
        PropertyKind.ENTITY,
        PropertyKind.COLLECTION,
    ]
    assert descriptor.is_entity
    assert descriptor.identity is not None
    assert descriptor.identity.name == "id"

    manager = descriptor.get("manager")
    assert manager is not None
    assert manager.value_type is Employee
    assert manager.nullable

    reports = descriptor.get("reports")
    assert reports is not None
    assert reports.element_kind is PropertyKind.ENTITY
    assert reports.container is list
    assert reports.value_type is Employee


def test_read_only_properties_and_class_vars_are_skipped(reflector: SchemaReflector) -> None:
    names = [prop.name for prop in reflector.describe(Employee).properties]
    assert "display_name" not in names
    assert "registry" not in names


def test_property_with_setter_is_settable(reflector: SchemaReflector) -> None:
    descriptor = reflector.describe(Account)
    assert [prop.name for prop in descriptor.properties] == ["id", "email"]
    email = descriptor.get("email")
    assert email is not None
    assert email.kind is PropertyKind.SCALAR
    assert email.value_type is str


def test_markers_name_identity_and_key(reflector: SchemaReflector) -> None:
    descriptor = reflector.describe(Territory)
    assert descriptor.identity is not None
    assert descriptor.identity.name == "code"
    title = descriptor.get("title")
    assert title is not None
    assert title.key == "Name"

    tags = descriptor.get("tags")
    scores = descriptor.get("scores")
    attributes = descriptor.get("attributes")
    assert tags is not None
    assert scores is not None
    assert attributes is not None
    assert (tags.kind, tags.container, tags.element_kind) == (PropertyKind.COLLECTION, set, PropertyKind.SCALAR)
    assert (scores.container, scores.value_type) == (tuple, int)
    assert attributes.kind is PropertyKind.UNSUPPORTED


def test_type_without_identity_is_a_component(reflector: SchemaReflector) -> None:
    assert reflector.kind_of(Address) is PropertyKind.COMPONENT
    assert reflector.kind_of(Employee) is PropertyKind.ENTITY
    assert reflector.kind_of(int) is PropertyKind.SCALAR
    assert reflector.kind_of(object) is PropertyKind.UNSUPPORTED


def test_pascal_key_style() -> None:
    reflector = SchemaReflector(ScalarConverter(), key_style="pascal")
    assert [prop.key for prop in reflector.describe(Employee).properties] == ["Id", "Name", "Manager", "Reports"]
    assert pascal_case("first_name") == "FirstName"


def test_custom_identity_name() -> None:
    reflector = SchemaReflector(ScalarConverter(), identity_name="city")
    assert reflector.kind_of(Address) is PropertyKind.ENTITY
    assert reflector.kind_of(Employee) is PropertyKind.COMPONENT


def test_frozen_types_expose_no_settable_properties(reflector: SchemaReflector) -> None:
    assert reflector.describe(Money).properties == ()
    assert reflector.describe(FrozenCustomer).properties == ()


def test_pydantic_models_are_described(reflector: SchemaReflector) -> None:
    descriptor = reflector.describe(Customer)
    assert [prop.name for prop in descriptor.properties] == ["id", "name", "referrer", "nicknames"]
    referrer = descriptor.get("referrer")
    assert referrer is not None
    assert referrer.kind is PropertyKind.ENTITY
    assert referrer.value_type is Customer


def test_create_fills_required_fields_with_zero_values(reflector: SchemaReflector) -> None:
    invoice = reflector.create(Invoice)
    assert invoice == Invoice(
        id=UUID(int=0),
        number="",
        total=Decimal(0),
        lines=[],
        address=None,
        paid=False,
    )


def test_create_pydantic_model(reflector: SchemaReflector) -> None:
    customer = reflector.create(Customer)
    assert isinstance(customer, Customer)
    assert customer.name == ""
    assert customer.referrer is None


def test_describe_rejects_plain_classes(reflector: SchemaReflector) -> None:
    with pytest.raises(TypeError, match="not a dataclass or pydantic model"):
        _ = reflector.describe(object)


def test_descriptions_are_cached(reflector: SchemaReflector) -> None:
    assert reflector.describe(Employee) is reflector.describe(Employee)
