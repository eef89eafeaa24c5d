"""
=====================================================
Pytest suite for setup/setup_orchestrator.py
=====================================================

Sections:
---------
1. Unit tests - Config validation, individual steps
2. Integration tests - run_complete_setup sequencing
3. Edge case tests - Failures, rollback variants
4. Smoke tests - Imports and CLI

Available markers:
------------------
unit, integration, edge_case, smoke

How to Execute:
---------------
All tests:          python -m pytest tests/tests_setup/test_setup_orchestrator.py -v
By category:        python -m pytest tests/tests_setup/test_setup_orchestrator.py -m unit

Note: Use 'python -m pytest' (not just 'pytest') to ensure correct Python path resolution.
"""

from unittest.mock import patch

import pytest

from setup.setup_orchestrator import SetupError, SetupOrchestrator, main

# ====================
# Mock Helper Classes
# ====================


class FakeConfig:
    """Mock config object for testing."""
    def __init__(self, missing_attr=None):
        self.db_host = 'localhost' if missing_attr != 'db_host' else None
        self.db_port = 5432 if missing_attr != 'db_port' else None
        self.db_user = 'postgres' if missing_attr != 'db_user' else None
        self.db_password = 'secret' if missing_attr != 'db_password' else None
        self.db_name = 'postgres' if missing_attr != 'db_name' else None
        self.payroll_db_name = 'payroll_db' if missing_attr != 'payroll_db_name' else None


class FakeDatabaseCreator:
    """Mock DatabaseCreator.

    Flags:
        exists_result: database exists before the step
        create_succeeds: database exists after create_database()
        should_raise_on_create: create_database() raises
    """
    def __init__(self, *args, **kwargs):
        self.kwargs = kwargs
        self.create_called = False
        self.drop_called = False
        self.closed = False
        self.exists_result = False
        self.create_succeeds = True
        self.should_raise_on_create = False
        self.drop_result = True

    def check_database_exists(self) -> bool:
        return self.exists_result

    def create_database(self) -> None:
        self.create_called = True
        if self.should_raise_on_create:
            raise Exception("Database creation failed")
        if self.create_succeeds:
            self.exists_result = True

    def drop_database(self, force: bool = True) -> bool:
        self.drop_called = True
        self.exists_result = False
        return self.drop_result

    def close_connections(self) -> None:
        self.closed = True


class FakeSchemaCreator:
    """Mock PayrollSchemaCreator."""
    def __init__(self, *args, **kwargs):
        self.kwargs = kwargs
        self.create_all_result = {'employees': True, 'salary_audit_log': True}
        self.seed_result = 4
        self.seed_called = False
        self.drop_all_called = False
        self.closed = False
        self.raise_on_seed = False

    def create_all_tables(self):
        return self.create_all_result

    def seed_sample_employees(self):
        self.seed_called = True
        if self.raise_on_seed:
            raise Exception("insert failed")
        return self.seed_result

    def drop_all_tables(self):
        self.drop_all_called = True
        return True

    def close_connections(self):
        self.closed = True


# ====================
# Fixtures
# ====================


@pytest.fixture
def mock_config():
    """Provide mock configuration."""
    fake = FakeConfig()
    with patch('setup.setup_orchestrator.config', fake):
        yield fake


@pytest.fixture
def mock_components():
    """Patch DatabaseCreator and PayrollSchemaCreator with fakes."""
    with patch('setup.setup_orchestrator.DatabaseCreator', FakeDatabaseCreator), \
         patch('setup.setup_orchestrator.PayrollSchemaCreator', FakeSchemaCreator):
        yield


@pytest.fixture
def orchestrator(mock_config, mock_components):
    orchestrator = SetupOrchestrator()
    orchestrator._initialize_components()
    return orchestrator


# ===============
# 1. UNIT TESTS
# ===============


@pytest.mark.unit
def test_init_reads_config(mock_config):
    orchestrator = SetupOrchestrator()

    assert orchestrator.host == 'localhost'
    assert orchestrator.admin_db == 'postgres'
    assert orchestrator.target_db == 'payroll_db'
    assert orchestrator.db_creator is None
    assert orchestrator.setup_steps == []


@pytest.mark.unit
@pytest.mark.parametrize("missing", ['db_host', 'db_password', 'payroll_db_name'])
def test_init_missing_config(missing):
    with patch('setup.setup_orchestrator.config', FakeConfig(missing_attr=missing)):
        with pytest.raises(SetupError, match="Missing required configuration"):
            SetupOrchestrator()


@pytest.mark.unit
def test_initialize_components_targets_payroll_db(orchestrator):
    assert orchestrator.db_creator.kwargs['admin_db'] == 'postgres'
    assert orchestrator.db_creator.kwargs['target_db'] == 'payroll_db'
    assert orchestrator.schema_creator.kwargs['database'] == 'payroll_db'


@pytest.mark.unit
def test_create_database_new(orchestrator):
    assert orchestrator.create_database() is True
    assert orchestrator.db_creator.create_called


@pytest.mark.unit
def test_create_database_already_exists(orchestrator):
    orchestrator.db_creator.exists_result = True

    assert orchestrator.create_database() is True
    assert not orchestrator.db_creator.create_called
    assert not orchestrator.db_creator.drop_called


@pytest.mark.unit
def test_create_database_force_recreate(orchestrator):
    orchestrator.db_creator.exists_result = True

    assert orchestrator.create_database(force_recreate=True) is True
    assert orchestrator.db_creator.drop_called
    assert orchestrator.db_creator.create_called
    assert orchestrator.schema_creator.closed


@pytest.mark.unit
def test_create_database_verification_fails(orchestrator):
    orchestrator.db_creator.create_succeeds = False
    assert orchestrator.create_database() is False
    assert orchestrator.setup_steps[-1]['status'] == 'FAILED'


@pytest.mark.unit
def test_create_database_exception_raises_setup_error(orchestrator):
    orchestrator.db_creator.should_raise_on_create = True
    with pytest.raises(SetupError, match="Database creation failed"):
        orchestrator.create_database()


@pytest.mark.unit
def test_create_tables_success(orchestrator):
    assert orchestrator.create_tables() is True


@pytest.mark.unit
def test_create_tables_missing_table(orchestrator):
    orchestrator.schema_creator.create_all_result = {'employees': True, 'salary_audit_log': False}
    assert orchestrator.create_tables() is False
    assert 'salary_audit_log' in orchestrator.setup_steps[-1]['error_message']


@pytest.mark.unit
def test_seed_sample_data(orchestrator):
    assert orchestrator.seed_sample_data() is True
    assert orchestrator.schema_creator.seed_called


@pytest.mark.unit
def test_step_timings_recorded(orchestrator):
    orchestrator.create_database()
    step = orchestrator.setup_steps[0]

    assert step['step_name'] == 'create_database'
    assert step['status'] == 'SUCCESS'
    assert step['duration'] >= 0


# ======================
# 2. INTEGRATION TESTS
# ======================


@pytest.mark.integration
def test_run_complete_setup_without_samples(orchestrator):
    results = orchestrator.run_complete_setup()

    assert results == {'database': True, 'tables': True}
    assert not orchestrator.schema_creator.seed_called


@pytest.mark.integration
def test_run_complete_setup_with_samples(orchestrator):
    results = orchestrator.run_complete_setup(include_samples=True)
    assert results == {'database': True, 'tables': True, 'samples': True}


@pytest.mark.integration
def test_run_complete_setup_initializes_components(mock_config, mock_components):
    orchestrator = SetupOrchestrator()
    results = orchestrator.run_complete_setup()

    assert all(results.values())
    assert isinstance(orchestrator.db_creator, FakeDatabaseCreator)


@pytest.mark.integration
def test_run_complete_setup_stops_at_first_failure(orchestrator):
    orchestrator.db_creator.should_raise_on_create = True

    results = orchestrator.run_complete_setup(include_samples=True)

    assert results == {'database': False}


@pytest.mark.integration
def test_run_complete_setup_sample_failure(orchestrator):
    orchestrator.schema_creator.raise_on_seed = True

    results = orchestrator.run_complete_setup(include_samples=True)

    assert results == {'database': True, 'tables': True, 'samples': False}


# ====================
# 3. EDGE CASE TESTS
# ====================


@pytest.mark.edge_case
def test_rollback_drops_database(orchestrator):
    assert orchestrator.rollback_setup() is True
    assert orchestrator.db_creator.drop_called
    assert not orchestrator.schema_creator.drop_all_called


@pytest.mark.edge_case
def test_rollback_keep_database_drops_tables(orchestrator):
    assert orchestrator.rollback_setup(keep_database=True) is True
    assert orchestrator.schema_creator.drop_all_called
    assert not orchestrator.db_creator.drop_called


@pytest.mark.edge_case
def test_rollback_failure_returns_false(orchestrator):
    def failing_drop(force=True):
        raise Exception("permission denied")

    orchestrator.db_creator.drop_database = failing_drop
    assert orchestrator.rollback_setup() is False


@pytest.mark.edge_case
def test_close_connections_closes_components(orchestrator):
    orchestrator.close_connections()
    assert orchestrator.db_creator.closed
    assert orchestrator.schema_creator.closed


# ===============
# 4. SMOKE TESTS
# ===============


@pytest.mark.smoke
def test_main_setup_exit_code(mock_config, mock_components):
    with patch('sys.argv', ['setup_orchestrator', '--samples']):
        assert main() == 0


@pytest.mark.smoke
def test_main_rollback_exit_code(mock_config, mock_components):
    with patch('sys.argv', ['setup_orchestrator', '--rollback', '--keep-db']):
        assert main() == 0


@pytest.mark.smoke
def test_main_config_error_exit_code(mock_components):
    with patch('setup.setup_orchestrator.config', FakeConfig(missing_attr='db_host')), \
         patch('sys.argv', ['setup_orchestrator']):
        assert main() == 1


@pytest.mark.smoke
def test_setup_error_exception():
    assert issubclass(SetupError, Exception)
