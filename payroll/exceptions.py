"""
Exceptions raised by the employee store and salary rules.

Hierarchy:
    EmployeeStoreError
    ├── EmployeeNotFoundError   unknown employee id, nothing was written
    ├── InvalidInputError       rejected before any database access
    └── SalaryTransactionError  salary update + audit entry rolled back together
"""


class EmployeeStoreError(Exception):
    """Base exception for employee store operations."""
    pass


class EmployeeNotFoundError(EmployeeStoreError):
    """Raised when an operation references a nonexistent employee."""

    def __init__(self, employee_id: int):
        self.employee_id = employee_id
        super().__init__(f"Employee with ID {employee_id} not found")


class InvalidInputError(EmployeeStoreError, ValueError):
    """Raised for negative salaries, empty names and similar bad input."""
    pass


class SalaryTransactionError(EmployeeStoreError):
    """Raised when a salary change and its audit entry could not be committed."""
    pass
