"""
========================================================
Setup package for the payroll database.
========================================================

SQLAlchemy-based setup utilities: create the payroll database, create the
employees and salary_audit_log tables, and load employee rosters.

Modules:
    create_database: Database creation and dropping (admin connection)
    create_tables: Table creation, sample employees and CSV loading
    setup_orchestrator: Coordinated setup process and rollback

Example:
    >>> from setup import SetupOrchestrator
    >>>
    >>> orchestrator = SetupOrchestrator()
    >>> results = orchestrator.run_complete_setup(include_samples=True)
"""

__version__ = "0.1.0"
__all__ = [
    'SetupOrchestrator',
    'DatabaseCreator',
    'PayrollSchemaCreator'
]

from .create_database import DatabaseCreator
from .create_tables import PayrollSchemaCreator
from .setup_orchestrator import SetupOrchestrator
