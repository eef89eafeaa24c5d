"""
===========================================================
Employee store with audited salary changes.
===========================================================

Data-access layer for the employees table. Salary is only writable through
set_salary (and give_raise, which goes through the same path), and every
actual change appends a salary_audit_log row in the same transaction.

Transaction model:
    - Each public method opens one session and commits once at the end
    - set_salary locks the employee row (SELECT ... FOR UPDATE) before
      reading the old salary, so concurrent writers to the same employee
      serialize and every audit entry sees the value it replaced
    - Any failure inside the unit rolls back both the update and the audit row

Classes:
    EmployeeStore: Insert, look up, update and scan employees

Example:
    >>> from payroll.employee_store import EmployeeStore
    >>>
    >>> store = EmployeeStore()
    >>> employee_id = store.insert('John Doe', '50000.00', 'IT')
    >>> store.set_salary(employee_id, '52000.00')
    Decimal('50000.00')
    >>> store.get_salary_history(employee_id)[0]['new_salary']
    Decimal('52000.00')
"""

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from logs.audit_logger import AuditLoggerError, SalaryAuditLogger
from models.payroll_models import Employee
from payroll.exceptions import (
    EmployeeNotFoundError,
    EmployeeStoreError,
    SalaryTransactionError,
)
from payroll.salary_rules import (
    CENTS,
    categorize_salary,
    compute_raise,
    normalize_department,
    parse_amount,
    safe_divide,
    to_salary,
    validate_name,
    validate_raise_percentage,
)
from utils.database_utils import create_sqlalchemy_engine

logger = logging.getLogger(__name__)


class EmployeeStore:
    """Employee records plus the audited salary update path.

    Attributes:
        host: PostgreSQL server hostname (None uses config)
        port: PostgreSQL server port (None uses config)
        user: Database username (None uses config)
        password: Database password (None uses config)
        database: Database name (None uses the payroll database)

    Example:
        >>> store = EmployeeStore(engine=engine)
        >>> store.list_above_salary(55000)
        [{'id': 4, 'name': 'Alice Brown', 'salary': Decimal('70000.00'), ...}, ...]
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
        """Initialize the store.

        Args:
            host: PostgreSQL server hostname
            port: PostgreSQL server port number
            user: Database username
            password: Database password
            database: Database name
            engine: Existing engine to use instead of building one from the
                connection parameters
        """
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database

        self._engine: Optional[Engine] = engine
        self._owns_engine = engine is None
        self._session_factory: Optional[sessionmaker] = None
        self._audit_logger: Optional[SalaryAuditLogger] = None

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

    @contextmanager
    def _get_session(self):
        """One transaction: commit on success, roll back on any exception."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._get_engine())

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @property
    def audit_logger(self) -> SalaryAuditLogger:
        """Audit logger sharing this store's engine."""
        if self._audit_logger is None:
            self._audit_logger = SalaryAuditLogger(engine=self._get_engine())
        return self._audit_logger

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, name: str, salary: Any, department: Optional[str] = None) -> int:
        """
        Insert a new employee.

        Args:
            name: Employee name (non-empty)
            salary: Starting salary (non-negative, two decimal places)
            department: Optional department label

        Returns:
            The new employee's id

        Raises:
            InvalidInputError: If any field is invalid (nothing is written)
            EmployeeStoreError: If the insert fails
        """
        name = validate_name(name)
        salary = to_salary(salary)
        department = normalize_department(department)

        try:
            with self._get_session() as session:
                employee = Employee(name=name, salary=salary, department=department)
                session.add(employee)
                session.flush()

                employee_id = employee.id

            logger.info(f"Inserted employee {employee_id} ({name}, {department}) at {salary}")
            return employee_id

        except SQLAlchemyError as e:
            logger.error(f"Failed to insert employee '{name}': {e}")
            raise EmployeeStoreError(f"Failed to insert employee: {e}")

    def insert_many(self, rows: List[Tuple[str, Any, Optional[str]]]) -> List[int]:
        """
        Insert several employees in one transaction.

        Every row is validated first; if any row is invalid or any insert
        fails, no employee from the batch is stored.

        Args:
            rows: (name, salary, department) tuples

        Returns:
            The new employee ids, in row order

        Raises:
            InvalidInputError: If any row is invalid (nothing is written)
            EmployeeStoreError: If the batch could not be committed
        """
        records = [
            (validate_name(name), to_salary(salary), normalize_department(department))
            for name, salary, department in rows
        ]

        try:
            with self._get_session() as session:
                employees = []
                for name, salary, department in records:
                    employee = Employee(name=name, salary=salary, department=department)
                    session.add(employee)
                    session.flush()
                    employees.append(employee)

                employee_ids = [employee.id for employee in employees]

            logger.info(f"Inserted {len(employee_ids)} employees in one batch")
            return employee_ids

        except SQLAlchemyError as e:
            logger.error(f"Batch insert of {len(records)} employees rolled back: {e}")
            raise EmployeeStoreError(f"Failed to insert employees: {e}")

    def _lock_employee(self, session: Session, employee_id: int) -> Employee:
        employee = (
            session.query(Employee)
            .filter(Employee.id == employee_id)
            .with_for_update()
            .first()
        )
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    def _apply_salary(self, session: Session, employee: Employee, new_salary: Decimal) -> Decimal:
        """Update a locked employee's salary and audit it if it changed."""
        old_salary = employee.salary

        if old_salary == new_salary:
            logger.info(
                f"Salary for employee {employee.id} unchanged at {old_salary}; "
                f"no audit entry written"
            )
            return old_salary

        employee.salary = new_salary
        session.flush()

        self.audit_logger.record_change(
            session,
            employee_id=employee.id,
            old_salary=old_salary,
            new_salary=new_salary
        )
        return old_salary

    def set_salary(self, employee_id: int, new_salary: Any) -> Decimal:
        """
        Set an employee's salary, auditing the change.

        Setting the salary to its current value is a no-op: nothing is
        updated and no audit entry is written.

        Args:
            employee_id: Employee to update
            new_salary: New salary (non-negative, two decimal places)

        Returns:
            The salary before the update

        Raises:
            InvalidInputError: If new_salary is invalid (nothing is written)
            EmployeeNotFoundError: If the employee does not exist (nothing is written)
            SalaryTransactionError: If the update and its audit entry could not
                be committed together (both are rolled back)
        """
        new_salary = to_salary(new_salary, 'new_salary')

        try:
            with self._get_session() as session:
                employee = self._lock_employee(session, employee_id)
                old_salary = self._apply_salary(session, employee, new_salary)

            return old_salary

        except (SQLAlchemyError, AuditLoggerError) as e:
            logger.error(f"Salary update for employee {employee_id} rolled back: {e}")
            raise SalaryTransactionError(
                f"Failed to update salary for employee {employee_id}: {e}"
            )

    def give_raise(self, employee_id: int, raise_percentage: Any) -> Dict[str, Any]:
        """
        Give an employee a percentage raise (negative for a pay cut).

        Args:
            employee_id: Employee to update
            raise_percentage: Percentage, e.g. 10 for a 10% raise

        Returns:
            Dictionary with employee_id, name, old_salary and new_salary

        Raises:
            InvalidInputError: If the percentage is invalid or the result does
                not fit the salary column
            EmployeeNotFoundError: If the employee does not exist
            SalaryTransactionError: If the update could not be committed
        """
        validate_raise_percentage(raise_percentage)

        try:
            with self._get_session() as session:
                employee = self._lock_employee(session, employee_id)
                new_salary = compute_raise(employee.salary, raise_percentage)
                old_salary = self._apply_salary(session, employee, new_salary)
                name = employee.name

        except (SQLAlchemyError, AuditLoggerError) as e:
            logger.error(f"Raise for employee {employee_id} rolled back: {e}")
            raise SalaryTransactionError(
                f"Failed to give raise to employee {employee_id}: {e}"
            )

        logger.info(f"{name} salary updated from {old_salary} to {new_salary}")
        return {
            'employee_id': employee_id,
            'name': name,
            'old_salary': old_salary,
            'new_salary': new_salary
        }

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, employee_id: int) -> Optional[Dict[str, Any]]:
        """
        Look up an employee.

        Returns:
            Employee dictionary (id, name, salary, department), or None if no
            employee has this id
        """
        try:
            with self._get_session() as session:
                employee = session.query(Employee).filter(Employee.id == employee_id).first()
                return employee.to_dict() if employee else None

        except SQLAlchemyError as e:
            logger.error(f"Failed to get employee {employee_id}: {e}")
            raise EmployeeStoreError(f"Failed to get employee: {e}")

    def list_by_department(self, department: str) -> List[Dict[str, Any]]:
        """All employees in a department, ordered by id."""
        try:
            with self._get_session() as session:
                employees = (
                    session.query(Employee)
                    .filter(Employee.department == department)
                    .order_by(Employee.id.asc())
                    .all()
                )
                return [employee.to_dict() for employee in employees]

        except SQLAlchemyError as e:
            logger.error(f"Failed to list department '{department}': {e}")
            raise EmployeeStoreError(f"Failed to list employees by department: {e}")

    def list_above_salary(self, threshold: Any) -> List[Dict[str, Any]]:
        """
        Employees earning at least the threshold.

        Args:
            threshold: Minimum salary (inclusive)

        Returns:
            Employee dictionaries ordered by salary descending, then id
            ascending for equal salaries
        """
        threshold = parse_amount(threshold, 'threshold')

        try:
            with self._get_session() as session:
                employees = (
                    session.query(Employee)
                    .filter(Employee.salary >= threshold)
                    .order_by(Employee.salary.desc(), Employee.id.asc())
                    .all()
                )
                return [employee.to_dict() for employee in employees]

        except SQLAlchemyError as e:
            logger.error(f"Failed to list employees above {threshold}: {e}")
            raise EmployeeStoreError(f"Failed to list employees above salary: {e}")

    def count_by_department(self, department: str) -> int:
        """Number of employees in a department."""
        try:
            with self._get_session() as session:
                return (
                    session.query(func.count(Employee.id))
                    .filter(Employee.department == department)
                    .scalar()
                ) or 0

        except SQLAlchemyError as e:
            logger.error(f"Failed to count department '{department}': {e}")
            raise EmployeeStoreError(f"Failed to count employees by department: {e}")

    def list_salary_categories(self) -> List[Dict[str, Any]]:
        """Every employee with its salary band (Low/Medium/High), ordered by id."""
        try:
            with self._get_session() as session:
                employees = session.query(Employee).order_by(Employee.id.asc()).all()

                results = []
                for employee in employees:
                    record = employee.to_dict()
                    record['category'] = categorize_salary(employee.salary)
                    results.append(record)

                return results

        except SQLAlchemyError as e:
            logger.error(f"Failed to categorize salaries: {e}")
            raise EmployeeStoreError(f"Failed to categorize salaries: {e}")

    def get_department_summary(self, department: str) -> Dict[str, Any]:
        """
        Headcount and payroll totals for a department.

        Returns:
            Dictionary with department, employee_count, total_salary and
            average_salary (None for an empty department)
        """
        try:
            with self._get_session() as session:
                employee_count, total_salary = (
                    session.query(func.count(Employee.id), func.sum(Employee.salary))
                    .filter(Employee.department == department)
                    .one()
                )

        except SQLAlchemyError as e:
            logger.error(f"Failed to summarize department '{department}': {e}")
            raise EmployeeStoreError(f"Failed to summarize department: {e}")

        total_salary = Decimal(total_salary or 0).quantize(CENTS)
        average_salary = safe_divide(total_salary, employee_count)

        return {
            'department': department,
            'employee_count': employee_count,
            'total_salary': total_salary,
            'average_salary': (
                average_salary.quantize(CENTS) if average_salary is not None else None
            )
        }

    def get_salary_history(self, employee_id: int) -> List[Dict[str, Any]]:
        """Audit entries for an employee, oldest first."""
        return self.audit_logger.get_salary_history(employee_id=employee_id)

    def close_connections(self) -> None:
        """Dispose of the engine if this store created it."""
        if self._engine is not None and self._owns_engine:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            self._audit_logger = None
