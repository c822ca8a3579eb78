"""Employee directory used to enrich assignments with contact details."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from oncallplanner.domain.errors import ConfigurationError


@dataclass(frozen=True)
class Employee:
    """A person who can be put on call.

    Attributes:
        name: Identifier as used in the availability sheet (case-sensitive).
        position: Job title shown in the contact table.
        phone: Contact phone number.
    """

    name: str
    position: str = ""
    phone: str = ""


class EmployeeDirectory:
    """Lookup table from employee name to contact details.

    Missing entries are never an error: `phone_for` returns an empty string.
    Iteration follows the order employees were supplied in, which is also the
    escalation order of the printed contact table.
    """

    def __init__(self, employees: Iterable[Employee] = ()):
        self._employees: dict[str, Employee] = {}
        for employee in employees:
            if employee.name in self._employees:
                raise ConfigurationError(
                    f"Duplicate directory entry: {employee.name}",
                    field="directory",
                )
            self._employees[employee.name] = employee

    def __contains__(self, name: object) -> bool:
        return name in self._employees

    def __iter__(self):
        return iter(self._employees.values())

    def __len__(self) -> int:
        return len(self._employees)

    def get(self, name: Optional[str]) -> Optional[Employee]:
        if name is None:
            return None
        return self._employees.get(name)

    def phone_for(self, name: Optional[str]) -> str:
        employee = self.get(name)
        return employee.phone if employee else ""

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "EmployeeDirectory":
        """Build a directory from dicts with name/position/phone keys."""
        employees = []
        for index, record in enumerate(records):
            if not isinstance(record, dict) or not record.get("name"):
                raise ConfigurationError(
                    f"Directory entry {index} has no name",
                    field="directory",
                )
            employees.append(
                Employee(
                    name=str(record["name"]),
                    position=str(record.get("position", "")),
                    phone=str(record.get("phone", "")),
                )
            )
        return cls(employees)


def load_directory(path: Union[str, Path]) -> EmployeeDirectory:
    """Load an employee directory from a JSON list."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {path}: {exc}", field="directory") from exc
    if not isinstance(data, list):
        raise ConfigurationError("Directory must be a JSON list", field="directory")
    return EmployeeDirectory.from_records(data)
