"""
=====================================
Salary validation and calculations.
=====================================

Pure helpers shared by the employee store and the CLI. Nothing here touches
the database; every function either returns a value or raises
InvalidInputError.

Functions:
    parse_amount: Parse any numeric input to a finite Decimal
    to_salary: Parse and validate a salary amount (NUMERIC(10, 2))
    validate_name: Validate an employee name
    normalize_department: Validate an optional department label
    validate_raise_percentage: Reject raises below -100%
    compute_raise: Apply a percentage raise to a salary
    categorize_salary: Map a salary to its Low/Medium/High band
    safe_divide: Divide, returning None only for a zero denominator

Example:
    >>> from payroll.salary_rules import to_salary, compute_raise, categorize_salary
    >>>
    >>> salary = to_salary('50000')
    >>> compute_raise(salary, 10)
    Decimal('55000.00')
    >>> categorize_salary(salary)
    'Medium'
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from models.payroll_models import SALARY_PRECISION, SALARY_SCALE
from payroll.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

CENTS = Decimal(1).scaleb(-SALARY_SCALE)
MAX_SALARY = Decimal(10) ** (SALARY_PRECISION - SALARY_SCALE) - CENTS

NAME_MAX_LENGTH = 100
DEPARTMENT_MAX_LENGTH = 50

# Salary band boundaries (lower bound inclusive)
MEDIUM_SALARY_FLOOR = Decimal('50000')
HIGH_SALARY_FLOOR = Decimal('65000')


def parse_amount(value: Any, field: str) -> Decimal:
    """Convert value to a finite Decimal without rounding or range checks."""
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    try:
        # str() keeps floats like 0.1 from dragging in binary noise
        amount = Decimal(str(value).strip()) if isinstance(value, (str, float)) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInputError(f"{field} must be a number, got {value!r}")

    if not amount.is_finite():
        raise InvalidInputError(f"{field} must be a finite number, got {value!r}")
    return amount


def to_salary(value: Any, field: str = 'salary') -> Decimal:
    """
    Parse a salary amount and quantize it to cents.

    Args:
        value: int, str, float or Decimal amount
        field: Field name used in error messages

    Returns:
        Non-negative Decimal with two decimal places

    Raises:
        InvalidInputError: If the value is not numeric, negative, or does not
            fit NUMERIC(10, 2)
    """
    amount = parse_amount(value, field).quantize(CENTS, rounding=ROUND_HALF_UP)

    if amount < 0:
        raise InvalidInputError(f"{field} must not be negative, got {amount}")
    if amount > MAX_SALARY:
        raise InvalidInputError(f"{field} must not exceed {MAX_SALARY}, got {amount}")

    # Normalise -0.00 to 0.00
    return amount + 0


def validate_name(name: Any) -> str:
    """Return the stripped name, rejecting empty or over-long values."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError("name must be a non-empty string")

    name = name.strip()
    if len(name) > NAME_MAX_LENGTH:
        raise InvalidInputError(f"name must be at most {NAME_MAX_LENGTH} characters")
    return name


def normalize_department(department: Optional[str]) -> Optional[str]:
    """Strip a department label; blank labels become None."""
    if department is None:
        return None
    if not isinstance(department, str):
        raise InvalidInputError(f"department must be a string, got {department!r}")

    department = department.strip()
    if not department:
        return None
    if len(department) > DEPARTMENT_MAX_LENGTH:
        raise InvalidInputError(
            f"department must be at most {DEPARTMENT_MAX_LENGTH} characters"
        )
    return department


def validate_raise_percentage(raise_percentage: Any) -> Decimal:
    """Parse a raise percentage; below -100 would make the salary negative."""
    percentage = parse_amount(raise_percentage, 'raise_percentage')
    if percentage < -100:
        raise InvalidInputError(
            f"raise_percentage must not be below -100, got {percentage}"
        )
    return percentage


def compute_raise(salary: Decimal, raise_percentage: Any) -> Decimal:
    """
    Apply a percentage raise: salary * (1 + raise_percentage / 100).

    Negative percentages are pay cuts.

    Returns:
        New salary rounded half-up to cents
    """
    percentage = validate_raise_percentage(raise_percentage)
    new_salary = Decimal(salary) * (1 + percentage / 100)
    return to_salary(new_salary)


def categorize_salary(salary: Any) -> str:
    """
    Classify a salary into a band.

    Returns:
        'Low' below 50000, 'Medium' from 50000 up to (not including) 65000,
        'High' otherwise
    """
    amount = parse_amount(salary, 'salary')
    if amount < MEDIUM_SALARY_FLOOR:
        return 'Low'
    if amount < HIGH_SALARY_FLOOR:
        return 'Medium'
    return 'High'


def safe_divide(numerator: Any, denominator: Any) -> Optional[Decimal]:
    """
    Divide two numbers, returning None when the denominator is zero.

    Only division by zero is absorbed. Non-numeric operands still raise
    InvalidInputError.

    Example:
        >>> safe_divide(10, 2)
        Decimal('5')
        >>> safe_divide(10, 0) is None
        True
    """
    numerator = parse_amount(numerator, 'numerator')
    denominator = parse_amount(denominator, 'denominator')

    if denominator == 0:
        logger.warning(f"Division by zero is not allowed ({numerator} / 0), returning None")
        return None
    return numerator / denominator
