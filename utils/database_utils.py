"""
==================================================
Database connectivity utilities for PostgreSQL.
==================================================

Connection helpers and health checks shared by the employee store, the
audit logger, setup and the CLI. Keeps connection-building details out of
the data-access code.

Key Features:
    - Engine creation from config with pooling and pre-ping
    - Server availability check and wait-with-retries (setup only)
    - Database existence check against pg_database

Example:
    >>> from utils.database_utils import create_sqlalchemy_engine, wait_for_database
    >>>
    >>> wait_for_database(max_retries=5)
    >>> engine = create_sqlalchemy_engine(use_payroll=True)
"""

import logging
import time
from typing import Optional, Tuple

import psycopg2
from psycopg2 import OperationalError
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import config
from sql.query_builder import check_database_exists_sql

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Exception raised when the database never becomes reachable."""
    pass


def _resolve(value, default):
    return value if value is not None else default


def create_sqlalchemy_engine(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    use_payroll: bool = False,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10
) -> Engine:
    """
    Create a pooled SQLAlchemy engine.

    Args:
        host: Database hostname (defaults to config)
        port: Database port (defaults to config)
        user: Database user (defaults to config)
        password: Database password (defaults to config)
        database: Database name (defaults to payroll or admin database)
        use_payroll: If True and database is None, use the payroll database
        echo: Log SQL statements
        pool_size: Connection pool size
        max_overflow: Maximum overflow connections

    Returns:
        Configured Engine
    """
    connection_url = URL.create(
        drivername='postgresql',
        username=_resolve(user, config.db_user),
        password=_resolve(password, config.db_password),
        host=_resolve(host, config.db_host),
        port=_resolve(port, config.db_port),
        database=_resolve(database, config.payroll_db_name if use_payroll else config.db_name)
    )

    return create_engine(
        connection_url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True
    )


def check_database_available(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    timeout: int = 5
) -> bool:
    """
    Check whether PostgreSQL accepts connections.

    Returns:
        True if a connection could be opened, False otherwise
    """
    try:
        conn = psycopg2.connect(
            host=_resolve(host, config.db_host),
            port=_resolve(port, config.db_port),
            user=_resolve(user, config.db_user),
            password=_resolve(password, config.db_password),
            database=_resolve(database, config.db_name),
            connect_timeout=timeout
        )
        conn.close()
        return True
    except OperationalError as e:
        logger.debug(f"Database not available: {e}")
        return False


def wait_for_database(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    max_retries: int = 10,
    retry_delay: int = 2,
    timeout: int = 5
) -> bool:
    """
    Block until PostgreSQL is reachable, retrying with a fixed delay.

    Used by setup before creating the payroll database; salary operations
    never retry.

    Returns:
        True once the database is available

    Raises:
        DatabaseConnectionError: If every attempt fails
    """
    host = _resolve(host, config.db_host)
    port = _resolve(port, config.db_port)
    database = _resolve(database, config.db_name)

    logger.info(f"Waiting for PostgreSQL at {host}:{port}/{database}...")

    for attempt in range(1, max_retries + 1):
        if check_database_available(host, port, user, password, database, timeout):
            logger.info(f"✅ PostgreSQL is available (attempt {attempt}/{max_retries})")
            return True

        if attempt < max_retries:
            logger.warning(
                f"⏳ PostgreSQL not available yet (attempt {attempt}/{max_retries}), "
                f"retrying in {retry_delay}s..."
            )
            time.sleep(retry_delay)

    error_msg = (
        f"PostgreSQL at {host}:{port}/{database} did not become available "
        f"after {max_retries} attempts"
    )
    logger.error(f"❌ {error_msg}")
    raise DatabaseConnectionError(error_msg)


def verify_database_exists(
    database_name: str,
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None
) -> bool:
    """
    Check pg_database for the given database name.

    Returns:
        True if it exists, False if not or if the server cannot be queried
    """
    engine = create_sqlalchemy_engine(
        host=host,
        port=port,
        user=user,
        password=password,
        database=config.db_name
    )
    try:
        with engine.connect() as conn:
            result = conn.execute(
                text(check_database_exists_sql()),
                {'database_name': database_name}
            )
            return result.fetchone() is not None
    except SQLAlchemyError as e:
        logger.error(f"Failed to verify database existence: {e}")
        return False
    finally:
        engine.dispose()


def get_database_connection_info() -> dict:
    """Current connection settings, without the password."""
    return {
        'host': config.db_host,
        'port': config.db_port,
        'user': config.db_user,
        'admin_database': config.db_name,
        'payroll_database': config.payroll_db_name
    }


def verify_connection() -> Tuple[bool, Optional[str]]:
    """
    Check server availability and whether the payroll database exists.

    Returns:
        Tuple of (success, human-readable message)
    """
    if not check_database_available():
        return False, "PostgreSQL server not available"

    location = f"{config.db_host}:{config.db_port}"
    if verify_database_exists(config.payroll_db_name):
        return True, (
            f"Connected to PostgreSQL at {location}. "
            f"Payroll database '{config.payroll_db_name}' exists."
        )
    return True, (
        f"Connected to PostgreSQL at {location}. "
        f"Payroll database '{config.payroll_db_name}' does not exist yet."
    )
