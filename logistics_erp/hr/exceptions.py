"""
Custom exceptions for the HR utilities.
"""


class HRError(Exception):
    """Base exception for HR utility errors."""
    pass


class InvalidEmployeeCountError(HRError, ValueError):
    """Raised when an employee count used for code generation is negative."""

    def __init__(self, count: int):
        super().__init__(f"Employee count must be non-negative, got {count}")
        self.count = count
