"""
=============================================================
Payroll table creation and sample data loading.
=============================================================

Creates the employees and salary_audit_log tables from the ORM models
(columns, comments and indexes included) and loads employee rosters.

Rosters are always inserted through EmployeeStore.insert, so seeded rows get
the same validation as any other insert.

Key Features:
    - Table creation/drop through Base.metadata
    - Table verification through the SQLAlchemy inspector
    - Built-in sample roster (John Doe, Jane Smith, Bob Johnson, Alice Brown)
    - CSV roster loading with pandas, validated before anything is inserted

Example:
    >>> from setup.create_tables import PayrollSchemaCreator
    >>>
    >>> creator = PayrollSchemaCreator(database='payroll_audit')
    >>> creator.create_all_tables()
    >>> creator.seed_sample_employees()
    4
    >>> creator.load_employees_from_csv('datasets/employees.csv')
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from sqlalchemy import func, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from core.config import config
from models.payroll_models import Base, Employee
from payroll.employee_store import EmployeeStore
from payroll.exceptions import EmployeeStoreError, InvalidInputError
from payroll.salary_rules import normalize_department, to_salary, validate_name
from utils.database_utils import create_sqlalchemy_engine

logger = logging.getLogger(__name__)

PAYROLL_TABLES = [table.name for table in Base.metadata.sorted_tables]

SAMPLE_EMPLOYEES: List[Tuple[str, str, str]] = [
    ('John Doe', '50000.00', 'IT'),
    ('Jane Smith', '60000.00', 'HR'),
    ('Bob Johnson', '55000.00', 'IT'),
    ('Alice Brown', '70000.00', 'Finance'),
]

CSV_REQUIRED_COLUMNS = ['name', 'salary']


class SchemaCreationError(Exception):
    """Exception raised when payroll tables cannot be created or loaded."""
    pass


class PayrollSchemaCreator:
    """Create payroll tables and load employee rosters.

    Attributes:
        host: PostgreSQL server hostname (None uses config)
        port: PostgreSQL server port (None uses config)
        user: Database username (None uses config)
        password: Database password (None uses config)
        database: Payroll database name (None uses config)
    """

    def __init__(
        self,
        host: str = None,
        port: int = None,
        user: str = None,
        password: str = None,
        database: str = None,
        engine: Optional[Engine] = None
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database

        self._engine: Optional[Engine] = engine
        self._owns_engine = engine is None
        self._store: Optional[EmployeeStore] = None

    def _get_engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_sqlalchemy_engine(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                database=self.database,
                use_payroll=True
            )
        return self._engine

    @property
    def store(self) -> EmployeeStore:
        """Employee store on the same engine, used for all roster inserts."""
        if self._store is None:
            self._store = EmployeeStore(engine=self._get_engine())
        return self._store

    def create_all_tables(self) -> Dict[str, bool]:
        """
        Create the payroll tables if they do not exist.

        Returns:
            Dictionary mapping table names to existence after creation
        """
        logger.info("🚀 Creating payroll tables...")

        try:
            Base.metadata.create_all(self._get_engine(), checkfirst=True)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create payroll tables: {e}")
            raise SchemaCreationError(f"Failed to create payroll tables: {e}")

        results = self.verify_tables()
        logger.info(f"✅ Payroll tables ready: {', '.join(t for t, ok in results.items() if ok)}")
        return results

    def verify_tables(self) -> Dict[str, bool]:
        """Check which payroll tables exist."""
        try:
            inspector = inspect(self._get_engine())
            return {table: inspector.has_table(table) for table in PAYROLL_TABLES}
        except SQLAlchemyError as e:
            logger.error(f"Failed to inspect payroll tables: {e}")
            raise SchemaCreationError(f"Failed to inspect payroll tables: {e}")

    def drop_all_tables(self) -> bool:
        """Drop the payroll tables, audit history included."""
        logger.warning("Dropping payroll tables (employees, salary_audit_log)")
        try:
            Base.metadata.drop_all(self._get_engine(), checkfirst=True)
            return True
        except SQLAlchemyError as e:
            logger.error(f"Failed to drop payroll tables: {e}")
            raise SchemaCreationError(f"Failed to drop payroll tables: {e}")

    def count_employees(self) -> int:
        """Number of rows in the employees table."""
        session = sessionmaker(bind=self._get_engine())()
        try:
            return session.query(func.count(Employee.id)).scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Failed to count employees: {e}")
            raise SchemaCreationError(f"Failed to count employees: {e}")
        finally:
            session.close()

    def _insert_roster(self, rows: List[Tuple[str, Any, Optional[str]]]) -> List[int]:
        """Insert a roster as one transaction; a failure leaves the table unchanged."""
        try:
            return self.store.insert_many(rows)
        except EmployeeStoreError as e:
            logger.error(f"Roster insert rolled back: {e}")
            raise SchemaCreationError(f"Failed to insert employees: {e}")

    def seed_sample_employees(self) -> int:
        """
        Insert the sample roster into an empty employees table.

        Returns:
            Number of employees inserted (0 if the table already had rows)
        """
        existing = self.count_employees()
        if existing:
            logger.info(f"Employees table already has {existing} rows, skipping sample data")
            return 0

        employee_ids = self._insert_roster(SAMPLE_EMPLOYEES)
        logger.info(f"✅ Seeded {len(employee_ids)} sample employees")
        return len(employee_ids)

    def load_employees_from_csv(self, csv_path: Optional[str] = None) -> int:
        """
        Insert every employee listed in a CSV file.

        The file needs 'name' and 'salary' columns; 'department' is optional.
        Every row is validated before the first insert and all rows go in as
        one transaction, so a bad row or a failed insert rejects the whole file.

        Args:
            csv_path: Path to the CSV file (defaults to datasets/employees.csv;
                relative paths are also tried against the project root)

        Returns:
            Number of employees inserted

        Raises:
            SchemaCreationError: If the file is missing, malformed or invalid, or
                the insert fails (nothing is written)
        """
        path = Path(csv_path) if csv_path else config.project.sample_employees_file
        if not path.exists() and not path.is_absolute():
            path = config.project.project_root / path
        if not path.exists():
            raise SchemaCreationError(f"CSV file not found: {csv_path or path}")

        logger.info(f"📖 Reading employee roster from {path}")
        try:
            df = pd.read_csv(path, dtype=str, skipinitialspace=True)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise SchemaCreationError(f"Could not parse {path.name}: {e}")

        df.columns = [str(column).strip().lower() for column in df.columns]
        missing = [column for column in CSV_REQUIRED_COLUMNS if column not in df.columns]
        if missing:
            raise SchemaCreationError(
                f"{path.name} is missing required columns: {', '.join(missing)}"
            )
        if 'department' not in df.columns:
            df['department'] = None

        rows = []
        for line_number, record in enumerate(df.to_dict('records'), start=2):
            department = record['department']
            try:
                rows.append((
                    validate_name(record['name'] if not pd.isna(record['name']) else ''),
                    to_salary(record['salary'] if not pd.isna(record['salary']) else ''),
                    normalize_department(None if pd.isna(department) else department)
                ))
            except InvalidInputError as e:
                raise SchemaCreationError(f"{path.name} line {line_number}: {e}")

        employee_ids = self._insert_roster(rows)
        logger.info(f"✅ Loaded {len(employee_ids):,} employees from {path.name}")
        return len(employee_ids)

    def close_connections(self) -> None:
        """Dispose of the engine if this creator built it."""
        if self._store is not None:
            self._store.close_connections()
            self._store = None
        if self._engine is not None and self._owns_engine:
            self._engine.dispose()
            self._engine = None
