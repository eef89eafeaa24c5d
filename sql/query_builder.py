"""
==============================================
Catalogue queries for setup and health checks.
==============================================

Parameterized SQL used to inspect the PostgreSQL catalogue. Every query
takes its values as bind parameters (named in each docstring) so callers
execute them with sqlalchemy.text(...) plus a parameter dict.

Functions:
    check_database_exists_sql: Does a database exist?
    count_database_connections_sql: Active sessions on a database

Example:
    >>> from sqlalchemy import text
    >>> from sql.query_builder import check_database_exists_sql
    >>>
    >>> conn.execute(text(check_database_exists_sql()), {'database_name': 'payroll_audit'})
"""


def check_database_exists_sql() -> str:
    """
    Query returning one row if the database exists.

    Bind parameter: database_name.
    """
    return "SELECT 1 FROM pg_database WHERE datname = :database_name"


def count_database_connections_sql() -> str:
    """
    Query counting other sessions connected to a database.

    Bind parameter: database_name.
    """
    return """SELECT COUNT(*)
FROM pg_stat_activity
WHERE datname = :database_name
  AND pid <> pg_backend_pid()"""

