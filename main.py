"""
=========================================================
Main orchestrator for the payroll salary audit project.
=========================================================

Top-level entry point for the payroll database:
    - Database infrastructure setup and rollback
    - Employee inserts and lookups
    - Audited salary updates and percentage raises
    - Department, salary-band and high-earner reports
    - Salary history from the audit log
    - Roster loading from CSV

main.py is a thin CLI wrapper: setup is delegated to SetupOrchestrator and
every employee operation to EmployeeStore.

Usage:
    # Create database and tables, seed the sample employees
    python main.py --setup --samples

    # Add an employee and give them a raise
    python main.py --add "John Doe" --salary 50000 --department IT
    python main.py --give-raise 1 10

    # Reports
    python main.py --high-earners 55000
    python main.py --summary IT
    python main.py --history 1

Example:
    >>> from main import PayrollOrchestrator
    >>>
    >>> orchestrator = PayrollOrchestrator()
    >>> orchestrator.run_setup(include_samples=True)
    >>> orchestrator.give_raise(1, 10)
    {'employee_id': 1, 'name': 'John Doe', 'old_salary': Decimal('50000.00'), ...}
"""

import argparse
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.config import config
from core.logger import get_logger, setup_logging
from logs.audit_logger import AuditLoggerError
from payroll.employee_store import EmployeeStore
from payroll.exceptions import (
    EmployeeNotFoundError,
    EmployeeStoreError,
    InvalidInputError,
)
from payroll.salary_rules import to_salary
from setup.create_tables import PayrollSchemaCreator, SchemaCreationError
from setup.setup_orchestrator import SetupError, SetupOrchestrator
from utils.database_utils import (
    get_database_connection_info,
    verify_connection,
    verify_database_exists,
    wait_for_database,
)

logger = get_logger(__name__)


class OrchestratorError(Exception):
    """Exception raised for orchestrator operation errors."""
    pass


def _format_employee(record: Dict[str, Any]) -> str:
    department = record.get('department') or '-'
    line = f"#{record['id']} {record['name']} ({department}): {record['salary']}"
    if 'category' in record:
        line += f" [{record['category']}]"
    return line


class PayrollOrchestrator:
    """
    Top-level orchestrator for payroll operations.

    Attributes:
        store: EmployeeStore used for every employee operation (created on
            first use once the payroll database exists)
        setup_orchestrator: SetupOrchestrator instance (after run_setup)

    Example:
        >>> orchestrator = PayrollOrchestrator()
        >>> orchestrator.list_high_earners(55000)
    """

    def __init__(self, store: Optional[EmployeeStore] = None):
        self._store = store
        self.setup_orchestrator: Optional[SetupOrchestrator] = None

        logger.info("=" * 70)
        logger.info("Payroll Salary Audit - Main Orchestrator")
        logger.info("=" * 70)

    @property
    def store(self) -> EmployeeStore:
        if self._store is None:
            if not self.verify_setup_complete():
                raise OrchestratorError(
                    f"Payroll database '{config.payroll_db_name}' does not exist. "
                    "Run setup first: python main.py --setup"
                )
            self._store = EmployeeStore()
        return self._store

    def verify_prerequisites(self) -> bool:
        """
        Check PostgreSQL connectivity before setup.

        Raises:
            OrchestratorError: If the server cannot be reached
        """
        logger.info("🔍 Verifying prerequisites...")

        try:
            conn_info = get_database_connection_info()
            logger.info(f"📍 PostgreSQL Server: {conn_info['host']}:{conn_info['port']}")
            logger.info(f"👤 User: {conn_info['user']}")
            logger.info(f"🗄️  Admin Database: {conn_info['admin_database']}")
            logger.info(f"💼 Payroll Database: {conn_info['payroll_database']}")

            success, message = verify_connection()
            if not success:
                raise OrchestratorError(
                    f"PostgreSQL connection failed: {message}. "
                    f"Please ensure PostgreSQL is running at {conn_info['host']}:{conn_info['port']}"
                )
            logger.info(f"✅ {message}")

            wait_for_database(max_retries=5, retry_delay=2)
            logger.info("✅ All prerequisites verified successfully")
            return True

        except OrchestratorError:
            raise
        except Exception as e:
            logger.error(f"❌ Prerequisite verification failed: {e}")
            raise OrchestratorError(f"Prerequisite verification failed: {e}")

    def verify_setup_complete(self) -> bool:
        """True if the payroll database exists and is reachable."""
        try:
            return verify_database_exists(config.payroll_db_name)
        except Exception as e:
            logger.debug(f"Setup verification failed: {e}")
            return False

    def run_setup(
        self,
        include_samples: bool = False,
        force_recreate: bool = False
    ) -> Dict[str, bool]:
        """
        Create the payroll database and tables via SetupOrchestrator.

        Args:
            include_samples: Seed the sample employees
            force_recreate: Drop and recreate an existing database (DESTRUCTIVE)

        Returns:
            Dictionary mapping setup steps to success status

        Raises:
            OrchestratorError: If any setup step fails
        """
        logger.info("🚀 PAYROLL DATABASE SETUP")
        setup_start_time = datetime.now()

        try:
            self.verify_prerequisites()

            if force_recreate:
                logger.warning("⚠️  Force recreate enabled - existing payroll data will be dropped")

            self.setup_orchestrator = SetupOrchestrator()
            try:
                results = self.setup_orchestrator.run_complete_setup(
                    include_samples=include_samples,
                    force_recreate=force_recreate
                )
            finally:
                self.setup_orchestrator.close_connections()

            if not all(results.values()):
                failed_steps = [step for step, success in results.items() if not success]
                raise OrchestratorError(f"Setup failed for steps: {', '.join(failed_steps)}")

            setup_duration = (datetime.now() - setup_start_time).total_seconds()
            logger.info(f"✅ SETUP COMPLETED SUCCESSFULLY in {setup_duration:.2f} seconds")
            return results

        except SetupError as e:
            logger.error(f"❌ Setup failed: {e}")
            raise OrchestratorError(f"Setup failed: {e}")

    def rollback(self, keep_database: bool = False) -> bool:
        """Drop the payroll tables, or the whole database."""
        try:
            self.setup_orchestrator = SetupOrchestrator()
        except SetupError as e:
            raise OrchestratorError(f"Rollback failed: {e}")

        try:
            return self.setup_orchestrator.rollback_setup(keep_database=keep_database)
        finally:
            self.setup_orchestrator.close_connections()

    # ========================================================================
    # Employee operations
    # ========================================================================

    def add_employee(self, name: str, salary: Any, department: Optional[str] = None) -> int:
        employee_id = self.store.insert(name, salary, department)
        logger.info(f"✅ Added employee #{employee_id}: {name}")
        return employee_id

    def get_employee(self, employee_id: int) -> Dict[str, Any]:
        """Look up an employee, raising EmployeeNotFoundError if absent."""
        record = self.store.get(employee_id)
        if record is None:
            raise EmployeeNotFoundError(employee_id)
        logger.info(_format_employee(record))
        return record

    def set_salary(self, employee_id: int, new_salary: Any) -> Dict[str, Any]:
        new_salary = to_salary(new_salary, 'new_salary')
        old_salary = self.store.set_salary(employee_id, new_salary)
        logger.info(f"✅ Employee #{employee_id} salary: {old_salary} → {new_salary}")
        return {'employee_id': employee_id, 'old_salary': old_salary, 'new_salary': new_salary}

    def give_raise(self, employee_id: int, raise_percentage: Any) -> Dict[str, Any]:
        return self.store.give_raise(employee_id, raise_percentage)

    # ========================================================================
    # Reports
    # ========================================================================

    def _log_records(self, title: str, records: List[Dict[str, Any]]) -> None:
        logger.info(f"📊 {title} ({len(records)})")
        for record in records:
            logger.info(f"  {_format_employee(record)}")

    def list_department(self, department: str) -> List[Dict[str, Any]]:
        records = self.store.list_by_department(department)
        self._log_records(f"Employees in {department}", records)
        return records

    def list_high_earners(self, threshold: Any) -> List[Dict[str, Any]]:
        records = self.store.list_above_salary(threshold)
        self._log_records(f"Employees earning at least {threshold}", records)
        return records

    def count_department(self, department: str) -> int:
        count = self.store.count_by_department(department)
        logger.info(f"📊 {department}: {count} employees")
        return count

    def salary_categories(self) -> List[Dict[str, Any]]:
        records = self.store.list_salary_categories()
        self._log_records("Salary categories", records)
        return records

    def department_summary(self, department: str) -> Dict[str, Any]:
        summary = self.store.get_department_summary(department)
        average = summary['average_salary'] if summary['average_salary'] is not None else 'n/a'
        logger.info(
            f"📊 {department}: {summary['employee_count']} employees, "
            f"total {summary['total_salary']}, average {average}"
        )
        return summary

    def salary_history(self, employee_id: int) -> List[Dict[str, Any]]:
        history = self.store.get_salary_history(employee_id)
        logger.info(f"📜 Salary history for employee #{employee_id} ({len(history)} changes)")
        for entry in history:
            logger.info(
                f"  {entry['change_date'].isoformat()}: "
                f"{entry['old_salary']} → {entry['new_salary']}"
            )
        return history

    def load_csv(self, csv_path: Optional[str] = None) -> int:
        """Insert every employee from a CSV roster (the bundled sample when csv_path is empty)."""
        creator = PayrollSchemaCreator()
        try:
            return creator.load_employees_from_csv(csv_path)
        except SchemaCreationError as e:
            raise OrchestratorError(f"CSV load failed: {e}")
        finally:
            creator.close_connections()

    def close(self) -> None:
        if self._store is not None:
            self._store.close_connections()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Payroll Salary Audit - Main Orchestrator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --setup --samples
  python main.py --add "John Doe" --salary 50000 --department IT
  python main.py --set-salary 1 52000
  python main.py --give-raise 1 10
  python main.py --high-earners 55000
  python main.py --history 1

Exit codes: 0 success, 1 error, 2 employee not found, 130 interrupted
        """
    )

    # Setup operations
    parser.add_argument('--setup', action='store_true', help='Create the payroll database and tables')
    parser.add_argument('--samples', action='store_true', help='Seed sample employees during setup')
    parser.add_argument(
        '--force-recreate',
        action='store_true',
        help='Drop and recreate database if exists (DANGEROUS!)'
    )
    parser.add_argument('--rollback', action='store_true', help='Drop the payroll database')
    parser.add_argument('--keep-db', action='store_true', help='With --rollback, drop only the tables')

    # Employee operations
    parser.add_argument('--add', metavar='NAME', help='Insert a new employee (requires --salary)')
    parser.add_argument('--salary', metavar='AMOUNT', help='Salary for --add')
    parser.add_argument('--department', metavar='DEPT', help='Department for --add, or list a department')
    parser.add_argument('--get', type=int, metavar='ID', help='Show one employee')
    parser.add_argument('--set-salary', nargs=2, metavar=('ID', 'AMOUNT'), help='Set a salary (audited)')
    parser.add_argument('--give-raise', nargs=2, metavar=('ID', 'PCT'), help='Give a percentage raise (audited)')

    # Reports
    parser.add_argument('--high-earners', metavar='THRESHOLD', help='Employees earning at least THRESHOLD')
    parser.add_argument('--count-department', metavar='DEPT', help='Number of employees in a department')
    parser.add_argument('--categories', action='store_true', help='Salary band for every employee')
    parser.add_argument('--summary', metavar='DEPT', help='Headcount, total and average salary')
    parser.add_argument('--history', type=int, metavar='ID', help='Salary change history')
    parser.add_argument(
        '--load-csv', nargs='?', const='', metavar='PATH',
        help='Insert employees from a CSV roster (default: datasets/employees.csv)'
    )

    parser.add_argument('--verbose', action='store_true', help='Enable verbose logging (DEBUG level)')
    return parser


def _parse_employee_id(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise InvalidInputError(f"Employee ID must be an integer, got {value!r}")


def main():
    """
    Command-line interface for the payroll orchestrator.

    Exit Codes:
        0: Success
        1: Error (invalid input, database or setup failure)
        2: Employee not found
        130: User interrupt (Ctrl+C)
    """
    parser = _build_parser()
    args = parser.parse_args()

    if args.verbose:
        setup_logging(log_level='DEBUG')

    if args.add is not None and args.salary is None:
        parser.error('--add requires --salary')

    orchestrator = None
    try:
        orchestrator = PayrollOrchestrator()

        if args.setup:
            orchestrator.run_setup(
                include_samples=args.samples,
                force_recreate=args.force_recreate
            )
            logger.info("🎉 Setup completed successfully!")
        elif args.rollback:
            if not orchestrator.rollback(keep_database=args.keep_db):
                return 1
        elif args.add is not None:
            orchestrator.add_employee(args.add, args.salary, args.department)
        elif args.get is not None:
            orchestrator.get_employee(args.get)
        elif args.set_salary:
            orchestrator.set_salary(_parse_employee_id(args.set_salary[0]), args.set_salary[1])
        elif args.give_raise:
            orchestrator.give_raise(_parse_employee_id(args.give_raise[0]), args.give_raise[1])
        elif args.high_earners is not None:
            orchestrator.list_high_earners(args.high_earners)
        elif args.count_department is not None:
            orchestrator.count_department(args.count_department)
        elif args.categories:
            orchestrator.salary_categories()
        elif args.summary is not None:
            orchestrator.department_summary(args.summary)
        elif args.history is not None:
            orchestrator.salary_history(args.history)
        elif args.load_csv is not None:
            inserted = orchestrator.load_csv(args.load_csv)
            logger.info(f"✅ Loaded {inserted} employees")
        elif args.department is not None:
            orchestrator.list_department(args.department)
        else:
            parser.print_help()
            logger.warning("⚠️  No operation specified. Use --setup, --add, --get, etc.")
            return 1

        return 0

    except EmployeeNotFoundError as e:
        logger.error(f"❌ {e}")
        return 2
    except InvalidInputError as e:
        logger.error(f"❌ Invalid input: {e}")
        return 1
    except (OrchestratorError, EmployeeStoreError, AuditLoggerError) as e:
        logger.error(f"❌ Operation failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("⚠️  Operation interrupted by user")
        return 130
    finally:
        if orchestrator is not None:
            orchestrator.close()


if __name__ == '__main__':
    sys.exit(main())
