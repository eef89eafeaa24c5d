"""
========================================
ORM Models for Payroll Audit
========================================

SQLAlchemy ORM model definitions, separated from the data-access and setup
logic so both can import them without circular dependencies.

Modules:
    payroll_models: Employee and SalaryAuditLog tables

Example:
    >>> from models import Base, Employee, SalaryAuditLog
    >>> Base.metadata.create_all(engine)
"""

__version__ = "0.1.0"
__all__ = [
    'Employee',
    'SalaryAuditLog',
    'Base',
]

from .payroll_models import Base, Employee, SalaryAuditLog
