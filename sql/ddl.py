"""
=======================================================================
Data Definition Language (DDL) utilities for database management.
=======================================================================

Builds the PostgreSQL statements that SQLAlchemy's metadata API does not
cover: creating, dropping and emptying the payroll database itself. Table
DDL (employees, salary_audit_log, comments, indexes) comes from the ORM
models through Base.metadata.create_all.

Functions:
    quote_identifier: Double-quote an identifier
    create_database_sql: Generate CREATE DATABASE statement
    drop_database_sql: Generate DROP DATABASE statement
    terminate_connections_sql: Terminate other sessions on a database

Example:
    >>> from sql.ddl import create_database_sql
    >>> print(create_database_sql('payroll_audit'))
    CREATE DATABASE "payroll_audit"
        WITH TEMPLATE = 'template0'
             ENCODING = 'UTF8'
             LC_COLLATE = 'en_GB.UTF-8'
             LC_CTYPE = 'en_GB.UTF-8';
"""

from typing import Optional


def quote_identifier(name: str) -> str:
    """Quote an identifier for PostgreSQL, doubling embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


def create_database_sql(
    database_name: str,
    template: str = 'template0',
    encoding: str = 'UTF8',
    lc_collate: str = 'en_GB.UTF-8',
    lc_ctype: str = 'en_GB.UTF-8',
    owner: Optional[str] = None
) -> str:
    """
    Generate CREATE DATABASE statement.

    Must be executed outside a transaction (AUTOCOMMIT).

    Args:
        database_name: Name of the database to create
        template: Template database to use
        encoding: Character encoding
        lc_collate: Collation order
        lc_ctype: Character classification
        owner: Optional database owner

    Returns:
        SQL CREATE DATABASE statement
    """
    sql = f"""CREATE DATABASE {quote_identifier(database_name)}
    WITH TEMPLATE = '{template}'
         ENCODING = '{encoding}'
         LC_COLLATE = '{lc_collate}'
         LC_CTYPE = '{lc_ctype}'"""

    if owner:
        sql += f"\n         OWNER = {quote_identifier(owner)}"

    return sql + ";"


def drop_database_sql(
    database_name: str,
    if_exists: bool = True,
    force: bool = True
) -> str:
    """
    Generate DROP DATABASE statement.

    Args:
        database_name: Name of the database to drop
        if_exists: Add IF EXISTS clause
        force: Add WITH (FORCE) clause (PostgreSQL 13+)

    Returns:
        SQL DROP DATABASE statement
    """
    sql_parts = ["DROP DATABASE"]

    if if_exists:
        sql_parts.append("IF EXISTS")

    sql_parts.append(quote_identifier(database_name))

    if force:
        sql_parts.append("WITH (FORCE)")

    return " ".join(sql_parts) + ";"


def terminate_connections_sql() -> str:
    """
    SQL terminating every other session on a database.

    Bind parameter: database_name.
    """
    return """SELECT pg_terminate_backend(pid)
FROM pg_stat_activity
WHERE datname = :database_name
  AND pid <> pg_backend_pid()"""
