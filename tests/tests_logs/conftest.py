"""
Shared fixtures for logs/ module tests.

Key fixtures:
- audit_logger_factory: builds a SalaryAuditLogger on a given engine

Note: imports go directly to logs.audit_logger rather than the logs package.
"""

import pytest


@pytest.fixture
def audit_logger_factory():
    """
    Factory that creates a SalaryAuditLogger sharing an existing engine
    (the SQLite engine fixture or a MagicMock).
    """
    def factory(engine):
        from logs.audit_logger import SalaryAuditLogger

        return SalaryAuditLogger(engine=engine)

    return factory
