"""
Shared pytest configuration and fixtures for all tests.

Key fixtures:
- sqlite_engine: in-memory SQLite engine with the payroll tables created
- employee_store: EmployeeStore bound to sqlite_engine
- seeded_store: employee_store holding the four sample employees
"""

import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

# Add project root to sys.path to enable importing project modules
# This allows tests to import from 'setup', 'core', 'payroll', etc. without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interactions")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")
    config.addinivalue_line("markers", "regression: Regression tests - previously fixed behaviour")
    config.addinivalue_line("markers", "system: System tests - full system behavior tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests - complete workflow tests")


@pytest.fixture
def sqlite_engine():
    """
    In-memory SQLite engine with employees and salary_audit_log created.

    StaticPool keeps every session on the same connection so they all see
    the same in-memory database.
    """
    from models.payroll_models import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def employee_store(sqlite_engine):
    """EmployeeStore sharing the SQLite engine."""
    from payroll.employee_store import EmployeeStore

    return EmployeeStore(engine=sqlite_engine)


@pytest.fixture
def seeded_store(employee_store):
    """
    Store holding the sample employees:
    1 John Doe 50000 IT, 2 Jane Smith 60000 HR, 3 Bob Johnson 55000 IT,
    4 Alice Brown 70000 Finance.
    """
    employee_store.insert('John Doe', '50000.00', 'IT')
    employee_store.insert('Jane Smith', '60000.00', 'HR')
    employee_store.insert('Bob Johnson', '55000.00', 'IT')
    employee_store.insert('Alice Brown', '70000.00', 'Finance')
    return employee_store
