from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import pytest

from form_binder import BinderSettings, FlatValueSet, FormBinder, IssueCode
from form_binder.conversion import ScalarConverter
from form_binder.errors import ConversionError
from form_binder.identity import EntityIdentityResolver, IdentityLookup, ResolutionStatus
from form_binder.lookups import InMemoryRepository


@dataclass
class Employee:
    id: int = 0
    name: str = ""
    manager: Employee | None = None
    reports: list[Employee] = field(default_factory=list)


@dataclass
class Territory:
    id: UUID | None = None
    name: str = ""


@dataclass
class Region:
    id: int = 0
    territory: Territory | None = None


class _ExplodingLookup:
    def get_by_identity(self, entity_type: type, identity: Any) -> Any | None:
        msg = f"unexpected lookup of {entity_type.__name__} {identity!r}"
        raise AssertionError(msg)


@pytest.fixture
def repository() -> InMemoryRepository:
    repo = InMemoryRepository()
    repo.add(Employee(id=3, name="Lindsay"), Employee(id=4, name="Gob"), Employee(id=12, name="George"))
    return repo


@pytest.fixture
def binder(repository: InMemoryRepository) -> FormBinder:
    return FormBinder(repository, settings=BinderSettings(key_style="pascal"))


def test_in_memory_repository_satisfies_lookup_protocol(repository: InMemoryRepository) -> None:
    assert isinstance(repository, IdentityLookup)
    assert len(repository) == 3
    assert repository.get_by_identity(Employee, 12).name == "George"
    assert repository.get_by_identity(Employee, 99) is None
    assert repository.remove(Employee, 12)
    assert not repository.remove(Employee, 12)


def test_resolver_statuses(repository: InMemoryRepository) -> None:
    resolver = EntityIdentityResolver(ScalarConverter(), repository)
    assert resolver.resolve(Employee, int, None).status is ResolutionStatus.NO_IDENTITY
    assert resolver.resolve(Employee, int, "").status is ResolutionStatus.NO_IDENTITY
    assert resolver.resolve(Employee, int, "0").status is ResolutionStatus.NO_IDENTITY
    assert resolver.resolve(Employee, int, "99").status is ResolutionStatus.NOT_FOUND

    resolved = resolver.resolve(Employee, int, "3")
    assert resolved.status is ResolutionStatus.RESOLVED
    assert resolved.identity == 3
    assert resolved.instance is repository.get_by_identity(Employee, 3)

    with pytest.raises(ConversionError):
        _ = resolver.resolve(Employee, int, "three")


def test_resolver_without_lookup_is_detached() -> None:
    resolver = EntityIdentityResolver(ScalarConverter())
    assert not resolver.enabled
    resolution = resolver.resolve(Employee, int, "7")
    assert resolution.status is ResolutionStatus.DETACHED
    assert resolution.identity == 7


def test_entity_property_resolves_existing_instance(binder: FormBinder, repository: InMemoryRepository) -> None:
    values = {"Employee.Name": "Michael", "Employee.Manager.Id": "12", "Employee.Manager.Name": "George Sr."}
    employee = binder.bind(Employee, values, prefix="Employee").unwrap()
    stored = repository.get_by_identity(Employee, 12)
    assert employee.manager is stored
    assert stored.name == "George Sr."
    assert stored.id == 12


def test_identity_shorthand_resolves_existing_instance(binder: FormBinder, repository: InMemoryRepository) -> None:
    employee = binder.bind(Employee, {"Employee.Manager": "12"}, prefix="Employee").unwrap()
    assert employee.manager is repository.get_by_identity(Employee, 12)


def test_unindexed_entity_collection_resolves_each_identity(
    binder: FormBinder, repository: InMemoryRepository
) -> None:
    values = FlatValueSet([("Employee.Reports", "4"), ("Employee.Reports", "3"), ("Employee.Reports", "")])
    employee = binder.bind(Employee, values, prefix="Employee").unwrap()
    assert employee.reports == [repository.get_by_identity(Employee, 4), repository.get_by_identity(Employee, 3)]
    assert employee.reports[0] is repository.get_by_identity(Employee, 4)


def test_indexed_entity_collection_resolves_and_populates(binder: FormBinder, repository: InMemoryRepository) -> None:
    values = FlatValueSet(
        [
            ("Employee.Reports[1].Name", "Brand new"),
            ("Employee.Reports[0].Id", "3"),
            ("Employee.Reports[0].Name", "Lindsay Bluth"),
        ]
    )
    employee = binder.bind(Employee, values, prefix="Employee").unwrap()
    assert employee.reports[0] is repository.get_by_identity(Employee, 3)
    assert employee.reports[0].name == "Lindsay Bluth"
    assert employee.reports[1].id == 0
    assert employee.reports[1].name == "Brand new"


def test_unknown_identity_is_recorded_and_siblings_continue(binder: FormBinder) -> None:
    values = {
        "Employee.Name": "Michael",
        "Employee.Manager.Id": "99",
        "Employee.Manager.Name": "Nobody",
        "Employee.Reports": "77",
    }
    result = binder.bind(Employee, values, prefix="Employee")
    assert result.instance.name == "Michael"
    assert result.instance.manager is None
    assert result.instance.reports == []
    assert [(issue.code, issue.key) for issue in result.issues] == [
        (IssueCode.IDENTITY_NOT_FOUND, "Employee.Manager.Id"),
        (IssueCode.IDENTITY_NOT_FOUND, "Employee.Reports"),
    ]
    assert result.issues[0].detail == {"entity": "Employee", "identity": "99"}


def test_unparseable_identity_is_a_conversion_error(binder: FormBinder) -> None:
    result = binder.bind(Employee, {"Employee.Manager.Id": "twelve"}, prefix="Employee")
    assert result.instance.manager is None
    [issue] = result.issues
    assert issue.code is IssueCode.CONVERSION_ERROR
    assert issue.key == "Employee.Manager.Id"


def test_empty_guid_token_constructs_without_lookup() -> None:
    binder = FormBinder(_ExplodingLookup(), settings=BinderSettings(key_style="pascal"))
    values = {"Region.Territory.Id": "", "Region.Territory.Name": "Someplace, USA"}
    region = binder.bind(Region, values, prefix="Region").unwrap()
    assert region.territory is not None
    assert region.territory.id == UUID(int=0)
    assert region.territory.name == "Someplace, USA"

    zero = {"Region.Territory.Id": str(UUID(int=0)), "Region.Territory.Name": "Elsewhere"}
    region = binder.bind(Region, zero, prefix="Region").unwrap()
    assert region.territory.id == UUID(int=0)
    assert region.territory.name == "Elsewhere"


def test_root_is_constructed_fresh_by_default(binder: FormBinder, repository: InMemoryRepository) -> None:
    employee = binder.bind(Employee, {"Employee.Id": "3", "Employee.Name": "Copy"}, prefix="Employee").unwrap()
    assert employee is not repository.get_by_identity(Employee, 3)
    assert employee.id == 3
    assert repository.get_by_identity(Employee, 3).name == "Lindsay"


def test_root_entity_resolution_when_enabled(repository: InMemoryRepository) -> None:
    binder = FormBinder(repository, settings=BinderSettings(key_style="pascal", resolve_root_entity=True))
    employee = binder.bind(Employee, {"Employee.Id": "3", "Employee.Name": "Lindsay F."}, prefix="Employee").unwrap()
    assert employee is repository.get_by_identity(Employee, 3)
    assert employee.name == "Lindsay F."

    missing = binder.bind(Employee, {"Employee.Id": "404", "Employee.Name": "x"}, prefix="Employee")
    assert missing.instance is None
    assert missing.issues[0].code is IssueCode.IDENTITY_NOT_FOUND


def test_blank_guid_binds_zero_identity_at_root_and_nested() -> None:
    binder = FormBinder(settings=BinderSettings(key_style="pascal"))
    territory = binder.bind(Territory, {"Territory.Id": ""}, prefix="Territory").unwrap()
    region = binder.bind(Region, {"Region.Territory.Id": ""}, prefix="Region").unwrap()
    assert territory.id == UUID(int=0)
    assert region.territory.id == territory.id


def test_resolver_parse_and_lookup_are_separate_steps(repository: InMemoryRepository) -> None:
    resolver = EntityIdentityResolver(ScalarConverter(), repository)
    assert resolver.parse(int, None) is None
    assert resolver.parse(int, "") is None
    assert resolver.parse(UUID, "") == UUID(int=0)
    assert resolver.lookup(Territory, UUID, UUID(int=0)).status is ResolutionStatus.NO_IDENTITY
    assert resolver.lookup(Employee, int, 4).instance is repository.get_by_identity(Employee, 4)


def test_lookup_failures_propagate_out_of_bind() -> None:
    class _BrokenLookup:
        def get_by_identity(self, entity_type: type, identity: Any) -> Any | None:
            raise ConversionError("corrupt", int, "stored record is damaged")

    binder = FormBinder(_BrokenLookup(), settings=BinderSettings(key_style="pascal"))
    with pytest.raises(ConversionError, match="stored record is damaged"):
        _ = binder.bind(Employee, {"Employee.Manager": "12"}, prefix="Employee")
