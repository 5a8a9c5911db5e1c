"""
Data models for the logistics ERP core.
"""

from .employee_models import Employee, EmployeeStatus, EmploymentType

__all__ = [
    'Employee',
    'EmployeeStatus',
    'EmploymentType',
]
