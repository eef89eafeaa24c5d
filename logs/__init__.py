"""
=============================================================
Audit logging for salary changes.
=============================================================

Modules:
    audit_logger: SalaryAuditLogger, the append-only salary_audit_log writer
        and reader

Example:
    >>> from logs.audit_logger import SalaryAuditLogger
    >>>
    >>> audit_logger = SalaryAuditLogger()
    >>> audit_logger.get_salary_history(employee_id=1)
"""

__version__ = "0.1.0"
__all__ = ['SalaryAuditLogger', 'AuditLoggerError']

# Import directly from logs.audit_logger; no eager imports here so that
# models/ and utils/ can be loaded without the ORM session machinery.
