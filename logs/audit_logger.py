"""
===========================================================
Salary change audit logging.
===========================================================

Application-level replacement for an "AFTER UPDATE OF salary" row trigger.
The employee store calls SalaryAuditLogger.record_change with its own open
session, so the audit row is written in the same transaction as the salary
update: both commit together or both roll back.

Classes:
    SalaryAuditLogger: Append salary changes and query the audit history

Key Features:
    - Audit writes share the caller's session/transaction
    - Per-employee timestamps never go backwards
    - History returned in insertion order (log_id ascending)
    - SQLAlchemy ORM on the salary_audit_log table

Example:
    >>> from logs.audit_logger import SalaryAuditLogger
    >>>
    >>> audit_logger = SalaryAuditLogger(engine=engine)
    >>>
    >>> # Inside an open transaction owned by the caller
    >>> log_id = audit_logger.record_change(
    ...     session,
    ...     employee_id=1,
    ...     old_salary=Decimal('50000.00'),
    ...     new_salary=Decimal('52000.00')
    ... )
    >>>
    >>> # Read side, own session
    >>> for entry in audit_logger.get_salary_history(employee_id=1):
    ...     print(entry['old_salary'], '->', entry['new_salary'])
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from models.payroll_models import SalaryAuditLog
from utils.database_utils import create_sqlalchemy_engine

logger = logging.getLogger(__name__)


class AuditLoggerError(Exception):
    """Exception raised when an audit entry cannot be written or read."""
    pass


def _as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (drivers without timezone support)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SalaryAuditLogger:
    """Append-only log of employee salary changes.

    Attributes:
        host: PostgreSQL server hostname (None uses config)
        port: PostgreSQL server port (None uses config)
        user: Database username (None uses config)
        password: Database password (None uses config)
        database: Database name (None uses the payroll database)

    Example:
        >>> audit_logger = SalaryAuditLogger(database='payroll_audit')
        >>> audit_logger.get_salary_history(employee_id=1)
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
        """Initialize the audit logger.

        Args:
            host: PostgreSQL server hostname
            port: PostgreSQL server port number
            user: Database username
            password: Database password
            database: Database name
            engine: Existing engine to share (e.g. the employee store's);
                connection parameters are ignored when given
        """
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database

        self._engine: Optional[Engine] = engine
        self._owns_engine = engine is None
        self._session_factory: Optional[sessionmaker] = None

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
        """Read-only session scope for history queries."""
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

    def latest_change_date(self, session: Session, employee_id: int) -> Optional[datetime]:
        """Most recent change_date logged for an employee, in UTC."""
        latest = (
            session.query(func.max(SalaryAuditLog.change_date))
            .filter(SalaryAuditLog.employee_id == employee_id)
            .scalar()
        )
        return _as_utc(latest) if latest is not None else None

    def record_change(
        self,
        session: Session,
        employee_id: int,
        old_salary: Optional[Decimal],
        new_salary: Decimal,
        change_date: Optional[datetime] = None
    ) -> int:
        """
        Append one audit entry inside the caller's transaction.

        The caller owns the session and decides whether to commit. Nothing is
        committed here; the row is only flushed to obtain its log_id.

        Args:
            session: Open session of the transaction performing the update
            employee_id: Employee whose salary changed
            old_salary: Salary immediately before the update
            new_salary: Salary immediately after the update
            change_date: Capture time; defaults to now (UTC)

        Returns:
            log_id of the new entry

        Raises:
            AuditLoggerError: If the entry cannot be written
        """
        try:
            change_date = _as_utc(change_date or datetime.now(timezone.utc))

            # Keep per-employee timestamps non-decreasing under clock adjustments
            previous = self.latest_change_date(session, employee_id)
            if previous is not None and previous > change_date:
                logger.debug(
                    f"Clamping change_date for employee {employee_id} "
                    f"from {change_date.isoformat()} to {previous.isoformat()}"
                )
                change_date = previous

            entry = SalaryAuditLog(
                employee_id=employee_id,
                old_salary=old_salary,
                new_salary=new_salary,
                change_date=change_date
            )
            session.add(entry)
            session.flush()

            logger.info(
                f"Audited salary change for employee {employee_id}: "
                f"{old_salary} -> {new_salary} (log_id {entry.log_id})"
            )
            return entry.log_id

        except SQLAlchemyError as e:
            logger.error(f"Failed to record salary change for employee {employee_id}: {e}")
            raise AuditLoggerError(f"Failed to record salary change: {e}")

    def get_salary_history(self, employee_id: int = None) -> List[Dict[str, Any]]:
        """
        Get audit entries in the order they were written.

        Args:
            employee_id: Restrict to one employee; None returns every entry

        Returns:
            List of audit entry dictionaries (log_id, employee_id, old_salary,
            new_salary, change_date)
        """
        try:
            with self._get_session() as session:
                query = session.query(SalaryAuditLog)

                if employee_id is not None:
                    query = query.filter(SalaryAuditLog.employee_id == employee_id)

                entries = query.order_by(SalaryAuditLog.log_id.asc()).all()

                results = []
                for entry in entries:
                    record = entry.to_dict()
                    record['change_date'] = _as_utc(entry.change_date)
                    results.append(record)

                return results

        except SQLAlchemyError as e:
            logger.error(f"Failed to get salary history: {e}")
            raise AuditLoggerError(f"Failed to get salary history: {e}")

    def count_entries(self, employee_id: int = None) -> int:
        """Number of audit entries, optionally for a single employee."""
        try:
            with self._get_session() as session:
                query = session.query(func.count(SalaryAuditLog.log_id))
                if employee_id is not None:
                    query = query.filter(SalaryAuditLog.employee_id == employee_id)
                return query.scalar() or 0

        except SQLAlchemyError as e:
            logger.error(f"Failed to count audit entries: {e}")
            raise AuditLoggerError(f"Failed to count audit entries: {e}")

    def close_connections(self) -> None:
        """Dispose of the engine if this logger created it."""
        if self._engine is not None and self._owns_engine:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
