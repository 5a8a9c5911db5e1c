"""
Employee master-data helpers: code generation, field validation,
summary counts and search.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional, List, Sequence, Any

from logistics_erp.models.employee_models import Employee, EmployeeStatus, EmploymentType
from logistics_erp.hr.exceptions import InvalidEmployeeCountError


EMPLOYEE_CODE_PREFIX = "EMP"
EMPLOYEE_CODE_PATTERN = re.compile(r'^EMP-\d{3,}$')

MIN_POSITION_LEVEL = 1
MAX_POSITION_LEVEL = 5


@dataclass
class EmployeeSummaryStats:
    """Headline counts for an employee list."""
    total: int = 0
    active: int = 0
    on_leave: int = 0
    new_this_month: int = 0


def generate_employee_code(count: int) -> str:
    """
    Generate the code for the next employee.

    Args:
        count: Number of employees that already have a code

    Returns:
        Code such as ``EMP-001``, numbered from ``count + 1``

    Raises:
        InvalidEmployeeCountError: If count is negative
    """
    if count < 0:
        raise InvalidEmployeeCountError(count)
    return f"{EMPLOYEE_CODE_PREFIX}-{count + 1:03d}"


def is_valid_employee_code(code: Any) -> bool:
    """Check a code has the ``EMP-`` prefix and at least three digits."""
    return isinstance(code, str) and EMPLOYEE_CODE_PATTERN.match(code) is not None


def is_valid_employee_status(value: Any) -> bool:
    """Case-sensitive check against the employee statuses."""
    return value in [status.value for status in EmployeeStatus]


def is_valid_employment_type(value: Any) -> bool:
    """Case-sensitive check against the employment types."""
    return value in [employment_type.value for employment_type in EmploymentType]


def is_valid_position_level(level: int,
                            min_level: int = MIN_POSITION_LEVEL,
                            max_level: int = MAX_POSITION_LEVEL) -> bool:
    return min_level <= level <= max_level


def calculate_employee_summary_stats(employees: Sequence[Employee],
                                     today: Optional[date] = None) -> EmployeeSummaryStats:
    """
    Count employees overall, by active/on-leave status, and those who joined
    in the current month.
    """
    today = today or date.today()
    stats = EmployeeSummaryStats(total=len(employees))

    for employee in employees:
        if employee.status == EmployeeStatus.ACTIVE:
            stats.active += 1
        elif employee.status == EmployeeStatus.ON_LEAVE:
            stats.on_leave += 1

        joined = employee.join_date
        if joined and joined.year == today.year and joined.month == today.month:
            stats.new_this_month += 1

    return stats


def filter_employees_by_search(employees: Sequence[Employee], search: str) -> List[Employee]:
    """Employees whose name or code contains ``search``, ignoring case."""
    term = (search or "").strip().lower()
    if not term:
        return list(employees)

    return [
        employee for employee in employees
        if term in employee.full_name.lower() or term in employee.employee_code.lower()
    ]
