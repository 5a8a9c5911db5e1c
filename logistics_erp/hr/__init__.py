"""
HR utilities for the logistics ERP core.

Covers reporting-line integrity and employee master-data helpers.
"""

from logistics_erp.hr.hierarchy import has_circular_reporting, get_reporting_chain
from logistics_erp.hr.employee_utils import (
    EmployeeSummaryStats,
    generate_employee_code,
    is_valid_employee_code,
    is_valid_employee_status,
    is_valid_employment_type,
    is_valid_position_level,
    calculate_employee_summary_stats,
    filter_employees_by_search
)
from logistics_erp.hr.exceptions import HRError, InvalidEmployeeCountError

__all__ = [
    'has_circular_reporting',
    'get_reporting_chain',
    'EmployeeSummaryStats',
    'generate_employee_code',
    'is_valid_employee_code',
    'is_valid_employee_status',
    'is_valid_employment_type',
    'is_valid_position_level',
    'calculate_employee_summary_stats',
    'filter_employees_by_search',
    'HRError',
    'InvalidEmployeeCountError'
]
