"""
====================================================
SQL utilities package for payroll database setup.
====================================================

Pure functions returning SQL strings for the operations the ORM does not
express: database lifecycle (ddl.py) and catalogue inspection
(query_builder.py). Catalogue queries use bind parameters.

Example:
    >>> from sql.ddl import create_database_sql
    >>> from sql.query_builder import check_database_exists_sql
"""

__version__ = "1.0.0"
__all__ = [
    # DDL functions
    'create_database_sql', 'drop_database_sql', 'terminate_connections_sql',
    # Catalogue queries
    'check_database_exists_sql', 'count_database_connections_sql',
]

from .ddl import create_database_sql, drop_database_sql, terminate_connections_sql
from .query_builder import (
    check_database_exists_sql,
    count_database_connections_sql,
)
