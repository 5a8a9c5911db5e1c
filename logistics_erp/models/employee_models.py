"""
Data models for HR employee records.
"""

from typing import Optional, Dict, Any, Union
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class EmployeeStatus(str, Enum):
    """Employment status of an employee record."""
    ACTIVE = "active"
    ON_LEAVE = "on_leave"
    SUSPENDED = "suspended"
    RESIGNED = "resigned"
    TERMINATED = "terminated"

    @property
    def label(self) -> str:
        return self.value.replace('_', ' ').title()


class EmploymentType(str, Enum):
    """Contract type of an employee."""
    PERMANENT = "permanent"
    CONTRACT = "contract"
    PROBATION = "probation"
    INTERN = "intern"
    OUTSOURCE = "outsource"

    @property
    def label(self) -> str:
        return self.value.title()


def _parse_date(value: Optional[Union[date, str]]) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


@dataclass
class Employee:
    """
    Employee record.

    Only the fields the HR utilities read are modelled. ``reporting_to`` is
    the id of the employee's direct manager.
    """
    id: str
    employee_code: str = ""
    full_name: str = ""
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    join_date: Optional[date] = None
    reporting_to: Optional[str] = None
    employment_type: EmploymentType = EmploymentType.PERMANENT
    department_id: Optional[str] = None
    position_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def has_manager(self) -> bool:
        return self.reporting_to is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Employee':
        """Create an employee from a storage row."""
        return cls(
            id=str(data['id']),
            employee_code=data.get('employee_code') or "",
            full_name=data.get('full_name') or "",
            status=EmployeeStatus(data.get('status') or EmployeeStatus.ACTIVE.value),
            join_date=_parse_date(data.get('join_date')),
            reporting_to=data.get('reporting_to'),
            employment_type=EmploymentType(
                data.get('employment_type') or EmploymentType.PERMANENT.value
            ),
            department_id=data.get('department_id'),
            position_id=data.get('position_id'),
            email=data.get('email'),
            phone=data.get('phone'),
        )
