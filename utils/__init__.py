"""
==========================
Utility Functions Package.
==========================

Database connectivity helpers shared across the project.

Modules:
    database_utils: PostgreSQL engines, availability checks and health checks
"""

__version__ = "1.0.0"
__all__ = [
    'wait_for_database',
    'check_database_available',
    'verify_database_exists',
    'create_sqlalchemy_engine',
    'verify_connection'
]

from .database_utils import (
    check_database_available,
    create_sqlalchemy_engine,
    verify_connection,
    verify_database_exists,
    wait_for_database,
)
