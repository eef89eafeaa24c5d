"""
=====================================================
Setup orchestrator for the payroll database.
=====================================================

Coordinates the setup steps in dependency order:
    1. Create the payroll database (admin connection, AUTOCOMMIT)
    2. Create the employees and salary_audit_log tables
    3. Seed sample employees (optional)

Each step is timed, a summary is logged at the end, and the first failing
step stops the run. Rollback drops the tables or the whole database.

Example:
    >>> # Command-line usage
    >>> # python -m setup.setup_orchestrator --samples
    >>>
    >>> from setup.setup_orchestrator import SetupOrchestrator
    >>>
    >>> orchestrator = SetupOrchestrator()
    >>> results = orchestrator.run_complete_setup(include_samples=True)
    >>> if all(results.values()):
    ...     print("Setup completed successfully")
    >>>
    >>> orchestrator.rollback_setup(keep_database=True)
"""

import time
from typing import Any, Dict, List, Optional

from core.config import config
from core.logger import get_logger, setup_logging
from setup.create_database import DatabaseCreator
from setup.create_tables import PayrollSchemaCreator

logger = get_logger(__name__)


class SetupError(Exception):
    """Exception raised for setup process errors.

    Raised when configuration is incomplete or a setup step fails.
    """
    pass


class SetupOrchestrator:
    """Orchestrate payroll database setup.

    Attributes:
        host: Database server hostname
        port: Database server port
        user: Database username
        password: Database password
        admin_db: Admin database name (typically 'postgres')
        target_db: Payroll database name
        db_creator: DatabaseCreator instance
        schema_creator: PayrollSchemaCreator instance
        setup_steps: Timing record for every step started
    """

    def __init__(self):
        """Initialize the orchestrator from configuration.

        No connections are opened until a setup step runs.

        Raises:
            SetupError: If required configuration is missing
        """
        self._validate_config()

        self.host = config.db_host
        self.port = config.db_port
        self.user = config.db_user
        self.password = config.db_password
        self.admin_db = config.db_name
        self.target_db = config.payroll_db_name

        self.db_creator: Optional[DatabaseCreator] = None
        self.schema_creator: Optional[PayrollSchemaCreator] = None

        self.setup_steps: List[Dict[str, Any]] = []

        logger.info(f"Initialized SetupOrchestrator for database: {self.target_db}")

    def _validate_config(self) -> None:
        required_configs = [
            ('db_host', 'Database host'),
            ('db_port', 'Database port'),
            ('db_user', 'Database user'),
            ('db_password', 'Database password'),
            ('db_name', 'Admin database name'),
            ('payroll_db_name', 'Payroll database name')
        ]

        missing = [
            description for attr, description in required_configs
            if not getattr(config, attr, None)
        ]
        if missing:
            raise SetupError(
                f"Missing required configuration: {', '.join(missing)}. "
                f"Please check your .env file."
            )

    def _initialize_components(self) -> None:
        logger.debug("Initializing setup components...")

        self.db_creator = DatabaseCreator(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            admin_db=self.admin_db,
            target_db=self.target_db
        )

        self.schema_creator = PayrollSchemaCreator(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            database=self.target_db
        )

    def _start_setup_step(self, step_name: str, step_description: str) -> Dict[str, Any]:
        step = {
            'step_name': step_name,
            'description': step_description,
            'start_time': time.time(),
            'status': 'RUNNING'
        }
        self.setup_steps.append(step)
        logger.info(f"Starting: {step_description}")
        return step

    def _end_setup_step(self, step: Dict[str, Any], status: str, error_message: str = None) -> None:
        step['status'] = status
        step['end_time'] = time.time()
        step['duration'] = step['end_time'] - step['start_time']

        if status == 'SUCCESS':
            logger.info(f"Step completed successfully ({step['duration']:.2f}s)")
        else:
            step['error_message'] = error_message
            logger.error(f"Step failed: {error_message}")

    def create_database(self, force_recreate: bool = False) -> bool:
        """Create the payroll database unless it already exists.

        Args:
            force_recreate: Drop an existing payroll database first

        Returns:
            True if the database exists after this step

        Raises:
            SetupError: If creation fails
        """
        step = self._start_setup_step("create_database", f"Create database {self.target_db}")

        try:
            if self.db_creator is None:
                self._initialize_components()

            if self.db_creator.check_database_exists():
                if not force_recreate:
                    logger.info(f"Database {self.target_db} already exists")
                    self._end_setup_step(step, 'SUCCESS')
                    return True

                logger.warning(f"Recreating database {self.target_db}")
                self.schema_creator.close_connections()
                self.db_creator.drop_database()

            self.db_creator.create_database()

            if not self.db_creator.check_database_exists():
                self._end_setup_step(step, 'FAILED', 'Database verification failed')
                return False

            self._end_setup_step(step, 'SUCCESS')
            return True

        except Exception as e:
            error_msg = f"Database creation failed: {e}"
            self._end_setup_step(step, 'FAILED', error_msg)
            raise SetupError(error_msg)

    def create_tables(self) -> bool:
        """Create the employees and salary_audit_log tables.

        Raises:
            SetupError: If table creation fails
        """
        step = self._start_setup_step("create_tables", "Create payroll tables")

        try:
            if self.schema_creator is None:
                self._initialize_components()

            results = self.schema_creator.create_all_tables()

            if all(results.values()):
                self._end_setup_step(step, 'SUCCESS')
                return True

            failed_tables = [name for name, created in results.items() if not created]
            self._end_setup_step(step, 'FAILED', f"Missing tables: {', '.join(failed_tables)}")
            return False

        except Exception as e:
            error_msg = f"Table creation failed: {e}"
            self._end_setup_step(step, 'FAILED', error_msg)
            raise SetupError(error_msg)

    def seed_sample_data(self) -> bool:
        """Insert the sample employees into an empty employees table.

        Raises:
            SetupError: If the inserts fail
        """
        step = self._start_setup_step("seed_samples", "Seed sample employees")

        try:
            if self.schema_creator is None:
                self._initialize_components()

            inserted = self.schema_creator.seed_sample_employees()
            logger.info(f"Sample employees inserted: {inserted}")
            self._end_setup_step(step, 'SUCCESS')
            return True

        except Exception as e:
            error_msg = f"Sample data failed: {e}"
            self._end_setup_step(step, 'FAILED', error_msg)
            raise SetupError(error_msg)

    def run_complete_setup(
        self,
        include_samples: bool = False,
        force_recreate: bool = False
    ) -> Dict[str, bool]:
        """Run every setup step in order, stopping at the first failure.

        Args:
            include_samples: Seed the sample employees after creating tables
            force_recreate: Drop and recreate an existing payroll database

        Returns:
            Dictionary mapping step names ('database', 'tables', 'samples')
            to success for every step attempted
        """
        logger.info("🚀 Starting payroll database setup...")

        setup_sequence = [
            ('database', lambda: self.create_database(force_recreate=force_recreate)),
            ('tables', self.create_tables)
        ]
        if include_samples:
            setup_sequence.append(('samples', self.seed_sample_data))

        results = {}
        for step_name, step_function in setup_sequence:
            try:
                results[step_name] = step_function()
            except SetupError as e:
                logger.error(f"Setup step '{step_name}' failed: {e}")
                results[step_name] = False

            if not results[step_name]:
                logger.error(f"Setup step '{step_name}' failed, stopping setup")
                break

        self._print_setup_summary(results)
        return results

    def _print_setup_summary(self, results: Dict[str, bool]) -> None:
        logger.info("=" * 60)
        logger.info("SETUP SUMMARY")
        logger.info("=" * 60)

        successful_steps = sum(1 for success in results.values() if success)
        for step_name, success in results.items():
            logger.info(f"{step_name.ljust(20)}: {'SUCCESS' if success else 'FAILED'}")

        logger.info("-" * 60)
        logger.info(f"Completed: {successful_steps}/{len(results)} steps")

        if successful_steps == len(results):
            logger.info("✅ Setup completed successfully!")
        else:
            logger.error("Setup incomplete. Please check errors above.")

        timed_steps = [step for step in self.setup_steps if 'duration' in step]
        if timed_steps:
            logger.info("Step timings:")
            for step in timed_steps:
                logger.info(f"  {step['step_name']}: {step['duration']:.2f}s")

    def rollback_setup(self, keep_database: bool = False) -> bool:
        """Drop what setup created. All payroll data is lost.

        Args:
            keep_database: Drop only the payroll tables and keep the database

        Returns:
            True if rollback succeeded
        """
        logger.warning("Starting setup rollback...")

        try:
            if self.db_creator is None:
                self._initialize_components()

            if keep_database:
                self.schema_creator.drop_all_tables()
                logger.info("Payroll tables dropped successfully")
                return True

            self.schema_creator.close_connections()
            if self.db_creator.drop_database():
                logger.info("Database dropped successfully")
            return True

        except Exception as e:
            logger.error(f"Rollback failed: {e}")
            return False

    def close_connections(self) -> None:
        """Dispose of every engine the components opened."""
        if self.schema_creator:
            self.schema_creator.close_connections()
        if self.db_creator:
            self.db_creator.close_connections()


def main():
    """Command-line interface for the setup orchestrator.

    Returns:
        Exit code: 0 for success, 1 for failure

    Example:
        python -m setup.setup_orchestrator --samples
        python -m setup.setup_orchestrator --force-recreate
        python -m setup.setup_orchestrator --rollback --keep-db
    """
    import argparse

    parser = argparse.ArgumentParser(
        description="Payroll Database Setup Orchestrator",
        epilog="Example: python -m setup.setup_orchestrator --samples"
    )
    parser.add_argument('--samples', action='store_true', help='Seed sample employees')
    parser.add_argument(
        '--force-recreate',
        action='store_true',
        help='Drop and recreate the payroll database if it exists'
    )
    parser.add_argument('--rollback', action='store_true', help='Rollback setup (drop database/tables)')
    parser.add_argument(
        '--keep-db',
        action='store_true',
        help='Keep database during rollback (only drop tables)'
    )
    parser.add_argument('--verbose', action='store_true', help='Enable verbose logging')

    args = parser.parse_args()

    if args.verbose:
        setup_logging(log_level='DEBUG')

    orchestrator = None
    try:
        orchestrator = SetupOrchestrator()

        if args.rollback:
            return 0 if orchestrator.rollback_setup(keep_database=args.keep_db) else 1

        results = orchestrator.run_complete_setup(
            include_samples=args.samples,
            force_recreate=args.force_recreate
        )
        return 0 if all(results.values()) else 1

    except SetupError as e:
        logger.error(f"Setup configuration error: {e}")
        return 1
    finally:
        if orchestrator is not None:
            orchestrator.close_connections()


if __name__ == '__main__':
    exit(main())
