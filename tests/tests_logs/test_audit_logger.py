"""
=================================================
Pytest suite for logs/audit_logger.py
=================================================

Sections:
---------
1. Unit tests - record_change / history / count with SQLite
2. Edge case tests - Timestamp clamping, error wrapping
3. Smoke tests - Construction and cleanup

Available markers:
------------------
unit, edge_case, smoke

Test Coverage:
--------------
SalaryAuditLogger:
- record_change inside a caller-owned session (no commit of its own)
- change_date defaults to UTC now and never goes backwards per employee
- get_salary_history ordering and filtering
- count_entries
- SQLAlchemy errors wrapped in AuditLoggerError

How to Execute:
---------------
All tests:          python -m pytest tests/tests_logs/test_audit_logger.py -v
By category:        python -m pytest tests/tests_logs/test_audit_logger.py -m unit
With coverage:      python -m pytest tests/tests_logs/test_audit_logger.py --cov=logs.audit_logger
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from logs.audit_logger import AuditLoggerError, SalaryAuditLogger, _as_utc


def _record(audit_logger, engine, employee_id, old, new, change_date=None):
    """Write one entry in its own committed transaction."""
    session = sessionmaker(bind=engine)()
    try:
        log_id = audit_logger.record_change(
            session,
            employee_id=employee_id,
            old_salary=Decimal(old),
            new_salary=Decimal(new),
            change_date=change_date
        )
        session.commit()
        return log_id
    finally:
        session.close()


# ===============
# 1. UNIT TESTS
# ===============


@pytest.mark.unit
def test_record_change_returns_log_id(sqlite_engine, audit_logger_factory):
    audit_logger = audit_logger_factory(sqlite_engine)

    first = _record(audit_logger, sqlite_engine, 1, '50000.00', '52000.00')
    second = _record(audit_logger, sqlite_engine, 1, '52000.00', '53000.00')

    assert second > first
    assert audit_logger.count_entries() == 2
    assert audit_logger.count_entries(employee_id=1) == 2
    assert audit_logger.count_entries(employee_id=2) == 0


@pytest.mark.unit
def test_record_change_does_not_commit(sqlite_engine, audit_logger_factory):
    """The entry disappears if the caller rolls back."""
    audit_logger = audit_logger_factory(sqlite_engine)
    session = sessionmaker(bind=sqlite_engine)()
    try:
        audit_logger.record_change(
            session, employee_id=1,
            old_salary=Decimal('1.00'), new_salary=Decimal('2.00')
        )
        session.rollback()
    finally:
        session.close()

    assert audit_logger.count_entries() == 0


@pytest.mark.unit
def test_history_fields_and_order(sqlite_engine, audit_logger_factory):
    audit_logger = audit_logger_factory(sqlite_engine)
    _record(audit_logger, sqlite_engine, 1, '50000.00', '52000.00')
    _record(audit_logger, sqlite_engine, 2, '60000.00', '61000.00')
    _record(audit_logger, sqlite_engine, 1, '52000.00', '51000.00')

    history = audit_logger.get_salary_history(employee_id=1)

    assert [(h['old_salary'], h['new_salary']) for h in history] == [
        (Decimal('50000.00'), Decimal('52000.00')),
        (Decimal('52000.00'), Decimal('51000.00')),
    ]
    assert set(history[0]) == {'log_id', 'employee_id', 'old_salary', 'new_salary', 'change_date'}
    assert len(audit_logger.get_salary_history()) == 3


@pytest.mark.unit
def test_change_date_defaults_to_utc_now(sqlite_engine, audit_logger_factory):
    audit_logger = audit_logger_factory(sqlite_engine)
    before = datetime.now(timezone.utc) - timedelta(seconds=1)

    _record(audit_logger, sqlite_engine, 1, '1.00', '2.00')

    change_date = audit_logger.get_salary_history(1)[0]['change_date']
    assert change_date.tzinfo is not None
    assert before <= change_date <= datetime.now(timezone.utc) + timedelta(seconds=1)


@pytest.mark.unit
def test_as_utc_handles_naive_and_aware():
    naive = datetime(2024, 1, 1, 12, 0)
    assert _as_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    plus_two = timezone(timedelta(hours=2))
    aware = datetime(2024, 1, 1, 14, 0, tzinfo=plus_two)
    assert _as_utc(aware) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# ====================
# 2. EDGE CASE TESTS
# ====================


@pytest.mark.edge_case
def test_change_date_clamped_to_previous_entry(sqlite_engine, audit_logger_factory):
    """A clock that went backwards never produces an earlier entry."""
    audit_logger = audit_logger_factory(sqlite_engine)
    future = datetime.now(timezone.utc) + timedelta(hours=1)

    _record(audit_logger, sqlite_engine, 1, '1.00', '2.00', change_date=future)
    _record(audit_logger, sqlite_engine, 1, '2.00', '3.00')

    dates = [h['change_date'] for h in audit_logger.get_salary_history(1)]
    assert dates[1] >= dates[0]
    assert dates[1].replace(microsecond=0) == future.replace(microsecond=0)


@pytest.mark.edge_case
def test_clamping_is_per_employee(sqlite_engine, audit_logger_factory):
    audit_logger = audit_logger_factory(sqlite_engine)
    future = datetime.now(timezone.utc) + timedelta(hours=1)

    _record(audit_logger, sqlite_engine, 1, '1.00', '2.00', change_date=future)
    _record(audit_logger, sqlite_engine, 2, '5.00', '6.00')

    assert audit_logger.get_salary_history(2)[0]['change_date'] < future


@pytest.mark.edge_case
def test_record_change_wraps_sqlalchemy_error(audit_logger_factory):
    audit_logger = audit_logger_factory(MagicMock())
    session = MagicMock()
    session.query.return_value.filter.return_value.scalar.return_value = None
    session.flush.side_effect = SQLAlchemyError("insert failed")

    with pytest.raises(AuditLoggerError):
        audit_logger.record_change(
            session, employee_id=1,
            old_salary=Decimal('1.00'), new_salary=Decimal('2.00')
        )
    session.commit.assert_not_called()


@pytest.mark.edge_case
def test_history_wraps_sqlalchemy_error(audit_logger_factory):
    audit_logger = audit_logger_factory(MagicMock())

    with patch('logs.audit_logger.sessionmaker') as mock_sessionmaker:
        session = mock_sessionmaker.return_value.return_value
        session.query.side_effect = SQLAlchemyError("select failed")

        with pytest.raises(AuditLoggerError):
            audit_logger.get_salary_history(employee_id=1)

        session.rollback.assert_called_once()
        session.close.assert_called_once()


@pytest.mark.edge_case
def test_history_empty_for_unknown_employee(sqlite_engine, audit_logger_factory):
    audit_logger = audit_logger_factory(sqlite_engine)
    assert audit_logger.get_salary_history(employee_id=42) == []


# ===============
# 3. SMOKE TESTS
# ===============


@pytest.mark.smoke
def test_smoke_engine_created_lazily_for_payroll_database():
    with patch('logs.audit_logger.create_sqlalchemy_engine') as mock_create:
        audit_logger = SalaryAuditLogger(host='db', port=5433)
        mock_create.assert_not_called()

        audit_logger._get_engine()
        mock_create.assert_called_once_with(
            host='db', port=5433, user=None, password=None, database=None, use_payroll=True
        )

        audit_logger.close_connections()
        mock_create.return_value.dispose.assert_called_once()


@pytest.mark.smoke
def test_smoke_shared_engine_not_disposed():
    engine = MagicMock()
    audit_logger = SalaryAuditLogger(engine=engine)
    audit_logger.close_connections()
    engine.dispose.assert_not_called()


@pytest.mark.smoke
def test_smoke_audit_logger_error_exception():
    error = AuditLoggerError("boom")
    assert isinstance(error, Exception)
    assert str(error) == "boom"
