"""
=============================================
Configuration management for payroll audit.
=============================================

Loads all configuration from environment variables (.env file) and exposes
a single Config instance used by the store, setup and CLI layers.

Environment variables:
    POSTGRES_HOST / POSTGRES_PORT: PostgreSQL server location
    POSTGRES_USER / POSTGRES_PASSWORD: Credentials
    POSTGRES_DB: Admin database used for CREATE/DROP DATABASE
    PAYROLL_DB: Database holding the employees and salary_audit_log tables
    LOG_LEVEL: Default application log level

Example:
    >>> from core.config import config
    >>>
    >>> print(f"Payroll database: {config.payroll_db_name}")
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


@dataclass
class DatabaseConfig:
    """PostgreSQL connection settings.

    Attributes:
        host: PostgreSQL server hostname or IP address
        port: PostgreSQL server port number
        user: Database username
        password: Database password
        database: Admin database name
        payroll_db: Payroll database name
    """

    host: str
    port: int
    user: str
    password: str
    database: str
    payroll_db: str


@dataclass
class ProjectConfig:
    """Project directory layout.

    Attributes:
        project_root: Absolute path to project root directory
        data_dir: Directory holding seed datasets
        logs_dir: Directory for log files
    """

    project_root: Path
    data_dir: Path
    logs_dir: Path

    @property
    def sample_employees_file(self) -> Path:
        """CSV file with the sample employee roster."""
        return self.data_dir / 'employees.csv'


class Config:
    """Centralized configuration manager.

    Attributes:
        db: DatabaseConfig with connection settings
        project: ProjectConfig with directory paths
        log_level: Default logging level name

    Example:
        >>> config = Config()
        >>> print(f"Connecting to {config.db_host}:{config.db_port}")
    """

    def __init__(self):
        self.db = DatabaseConfig(
            host=os.getenv('POSTGRES_HOST', 'localhost'),
            port=int(os.getenv('POSTGRES_PORT', '5432')),
            user=os.getenv('POSTGRES_USER', 'postgres'),
            password=os.getenv('POSTGRES_PASSWORD', ''),
            database=os.getenv('POSTGRES_DB', 'postgres'),
            payroll_db=os.getenv('PAYROLL_DB', 'payroll_audit')
        )

        project_root = Path(__file__).parent.parent
        self.project = ProjectConfig(
            project_root=project_root,
            data_dir=project_root / 'datasets',
            logs_dir=project_root / 'logs'
        )

        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()

    @property
    def db_host(self) -> str:
        return self.db.host

    @property
    def db_port(self) -> int:
        return self.db.port

    @property
    def db_user(self) -> str:
        return self.db.user

    @property
    def db_password(self) -> str:
        return self.db.password

    @property
    def db_name(self) -> str:
        """Admin database name."""
        return self.db.database

    @property
    def payroll_db_name(self) -> str:
        """Payroll database name."""
        return self.db.payroll_db


# Global configuration instance
config = Config()
