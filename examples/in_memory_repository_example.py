"""Minimal example binding a form onto entities held in an in-memory repository."""

from __future__ import annotations

from dataclasses import dataclass, field

from form_binder import BinderSettings, FlatValueSet, FormBinder, InMemoryRepository, configure_logging


@dataclass
class Employee:
    id: int = 0
    name: str = ""
    manager: Employee | None = None
    reports: list[Employee] = field(default_factory=list)


def main() -> None:
    """Bind a posted employee form whose manager and reports already exist."""
    configure_logging(verbose=True)
    repository = InMemoryRepository()
    repository.add(Employee(id=3, name="Lindsay"), Employee(id=4, name="Gob"), Employee(id=12, name="George"))

    binder = FormBinder(repository, settings=BinderSettings(key_style="pascal"))
    form = FlatValueSet.from_query_string(
        "Employee.Name=Michael&Employee.Manager=12&Employee.Reports=3&Employee.Reports=4&Employee.Reports[0].Name=Maeby"
    )
    result = binder.bind(Employee, form, prefix="Employee")
    print(f"{result.ok=}")
    print("employee:", result.instance.name)
    print("manager:", result.instance.manager)
    print("reports:", [report.name for report in result.instance.reports])

    missing = binder.bind(Employee, {"Employee.Manager.Id": "99"}, prefix="Employee")
    for issue in missing.issues:
        print(f"{issue.key}: {issue.message}")


if __name__ == "__main__":
    main()
