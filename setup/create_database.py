"""
==================================================
Payroll database creation.
==================================================

Creates and drops the payroll database itself. These statements cannot run
inside a transaction, so they go through a raw psycopg2 connection in
AUTOCOMMIT mode obtained from an engine bound to the admin database.

Prerequisites:
    - PostgreSQL 13+ (DROP DATABASE ... WITH (FORCE))
    - A user with CREATE DATABASE privileges
    - Connection to the admin database (NOT the payroll database)

Example:
    >>> from setup.create_database import DatabaseCreator
    >>>
    >>> creator = DatabaseCreator(
    ...     host='localhost',
    ...     port=5432,
    ...     user='postgres',
    ...     password='password',
    ...     admin_db='postgres',
    ...     target_db='payroll_audit'
    ... )
    >>> if not creator.check_database_exists():
    ...     creator.create_database()
"""

import logging
import time
from typing import Optional

import psycopg2
from psycopg2.extensions import ISOLATION_LEVEL_AUTOCOMMIT
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from sql.ddl import create_database_sql, drop_database_sql, terminate_connections_sql
from sql.query_builder import check_database_exists_sql, count_database_connections_sql
from utils.database_utils import create_sqlalchemy_engine

logger = logging.getLogger(__name__)


class DatabaseCreationError(Exception):
    """Exception raised when the payroll database cannot be created or dropped."""
    pass


class DatabaseCreator:
    """Create, drop and inspect the payroll database.

    Attributes:
        host: PostgreSQL server hostname
        port: PostgreSQL server port
        user: Database username with CREATE DATABASE privileges
        password: Database password
        admin_db: Admin database name (typically 'postgres')
        target_db: Name of the payroll database
        db_config: Template, encoding and locale used on creation
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        admin_db: str,
        target_db: str,
        template: str = 'template0',
        encoding: str = 'UTF8',
        lc_collate: str = 'en_GB.UTF-8',
        lc_ctype: str = 'en_GB.UTF-8'
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.admin_db = admin_db
        self.target_db = target_db

        self.db_config = {
            'template': template,
            'encoding': encoding,
            'lc_collate': lc_collate,
            'lc_ctype': lc_ctype
        }

        self._admin_engine: Optional[Engine] = None

    def _get_admin_engine(self) -> Engine:
        if self._admin_engine is None:
            self._admin_engine = create_sqlalchemy_engine(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                database=self.admin_db
            )
        return self._admin_engine

    def _execute_autocommit(self, statement: str) -> None:
        """Run a statement that must not be wrapped in a transaction."""
        engine = self._get_admin_engine()
        with engine.connect() as conn:
            raw_conn = conn.connection.driver_connection
            raw_conn.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)

            with raw_conn.cursor() as cursor:
                cursor.execute(statement)

    def check_database_exists(self) -> bool:
        """
        Check if the payroll database exists.

        Raises:
            DatabaseCreationError: If the catalogue cannot be queried
        """
        try:
            with self._get_admin_engine().connect() as conn:
                result = conn.execute(
                    text(check_database_exists_sql()),
                    {'database_name': self.target_db}
                )
                return result.fetchone() is not None

        except SQLAlchemyError as e:
            logger.error(f"Error checking database existence: {e}")
            raise DatabaseCreationError(f"Failed to check database existence: {e}")

    def terminate_connections(self) -> int:
        """
        Terminate other sessions connected to the payroll database.

        Returns:
            Number of sessions terminated
        """
        if not self.check_database_exists():
            logger.info(f"Database {self.target_db} does not exist")
            return 0

        params = {'database_name': self.target_db}
        try:
            with self._get_admin_engine().connect() as conn:
                connection_count = conn.execute(
                    text(count_database_connections_sql()), params
                ).scalar()

                if not connection_count:
                    logger.info(f"No active connections to {self.target_db}")
                    return 0

                logger.info(f"Terminating {connection_count} connections to {self.target_db}")
                conn.execute(text(terminate_connections_sql()), params)
                conn.commit()

                return connection_count

        except SQLAlchemyError as e:
            logger.error(f"Error terminating connections: {e}")
            raise DatabaseCreationError(f"Failed to terminate connections: {e}")

    def drop_database(self, force: bool = True) -> bool:
        """
        Drop the payroll database if it exists.

        Args:
            force: Use WITH (FORCE)

        Returns:
            True if the database was dropped, False if it did not exist
        """
        if not self.check_database_exists():
            logger.info(f"Database {self.target_db} does not exist")
            return False

        try:
            self.terminate_connections()

            logger.info(f"Dropping database {self.target_db}")
            self._execute_autocommit(
                drop_database_sql(database_name=self.target_db, if_exists=True, force=force)
            )

            logger.info(f"Successfully dropped database {self.target_db}")
            return True

        except (SQLAlchemyError, psycopg2.Error) as e:
            logger.error(f"Error dropping database: {e}")
            raise DatabaseCreationError(f"Failed to drop database: {e}")

    def create_database(self) -> None:
        """
        Create the payroll database with the configured encoding and locale.

        Raises:
            DatabaseCreationError: If creation fails
        """
        try:
            logger.info(f"Creating database {self.target_db}")
            self._execute_autocommit(
                create_database_sql(database_name=self.target_db, **self.db_config)
            )
            logger.info(f"Successfully created database {self.target_db}")

            # Brief wait for catalog refresh
            time.sleep(1)

        except (SQLAlchemyError, psycopg2.Error) as e:
            logger.error(f"Error creating database: {e}")
            raise DatabaseCreationError(f"Failed to create database: {e}")

    def close_connections(self) -> None:
        """Dispose of the admin engine."""
        if self._admin_engine:
            self._admin_engine.dispose()
            self._admin_engine = None
