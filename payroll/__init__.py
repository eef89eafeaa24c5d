"""
================================================
Payroll data-access package.
================================================

Employee records and their audited salary changes.

Modules:
    employee_store: EmployeeStore (insert, lookup, audited salary updates, scans)
    salary_rules: Validation and salary calculations (no I/O)
    exceptions: EmployeeStoreError hierarchy

Example:
    >>> from payroll.employee_store import EmployeeStore
    >>> from payroll.exceptions import EmployeeNotFoundError
    >>>
    >>> store = EmployeeStore()
    >>> try:
    ...     store.set_salary(999, '1000.00')
    ... except EmployeeNotFoundError:
    ...     print("No such employee")
"""

__version__ = "0.1.0"
__all__ = [
    'EmployeeStore',
    'EmployeeStoreError',
    'EmployeeNotFoundError',
    'InvalidInputError',
    'SalaryTransactionError',
]

from .employee_store import EmployeeStore
from .exceptions import (
    EmployeeNotFoundError,
    EmployeeStoreError,
    InvalidInputError,
    SalaryTransactionError,
)
