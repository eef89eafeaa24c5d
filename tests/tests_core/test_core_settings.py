"""
==================================================
Pytest suite for core/config.py and core/logger.py
==================================================

Sections:
---------
1. Unit tests - Environment loading, formatter, handler wiring
2. Smoke tests - Module-level singletons

Available markers:
------------------
unit, smoke

How to Execute:
---------------
All tests:          python -m pytest tests/tests_core/test_core_settings.py -v
"""

import logging

import pytest

from core.config import Config, config
from core.logger import ColoredFormatter, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)

# ===============
# 1. UNIT TESTS
# ===============


@pytest.mark.unit
def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv('POSTGRES_HOST', 'db.internal')
    monkeypatch.setenv('POSTGRES_PORT', '6543')
    monkeypatch.setenv('POSTGRES_USER', 'payroll')
    monkeypatch.setenv('POSTGRES_PASSWORD', 'pw')
    monkeypatch.setenv('POSTGRES_DB', 'admin')
    monkeypatch.setenv('PAYROLL_DB', 'payroll_test')
    monkeypatch.setenv('LOG_LEVEL', 'debug')

    cfg = Config()

    assert (cfg.db_host, cfg.db_port, cfg.db_user, cfg.db_password) == ('db.internal', 6543, 'payroll', 'pw')
    assert cfg.db_name == 'admin'
    assert cfg.payroll_db_name == 'payroll_test'
    assert cfg.log_level == 'DEBUG'


@pytest.mark.unit
def test_config_defaults(monkeypatch):
    for name in ('POSTGRES_HOST', 'POSTGRES_PORT', 'POSTGRES_DB', 'PAYROLL_DB', 'LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)

    cfg = Config()

    assert cfg.db_host == 'localhost'
    assert cfg.db_port == 5432
    assert cfg.db_name == 'postgres'
    assert cfg.payroll_db_name == 'payroll_audit'
    assert cfg.log_level == 'INFO'


@pytest.mark.unit
def test_project_paths():
    project = Config().project
    assert project.data_dir == project.project_root / 'datasets'
    assert project.sample_employees_file.name == 'employees.csv'
    assert project.sample_employees_file.exists()


@pytest.mark.unit
def test_colored_formatter_leaves_record_untouched():
    formatter = ColoredFormatter('%(emoji)s %(levelname)s %(message)s')
    record = logging.LogRecord('payroll', logging.ERROR, __file__, 1, 'boom', None, None)

    output = formatter.format(record)

    assert '\033[31mERROR\033[0m' in output
    assert output.startswith('❌')
    assert record.levelname == 'ERROR'


@pytest.mark.unit
def test_get_logger_level_override():
    logger = get_logger('payroll.test.override', level='warning')
    assert logger.level == logging.WARNING


@pytest.mark.unit
def test_setup_logging_replaces_handlers_and_writes_file(restore_root_logger, tmp_path):
    setup_logging(log_level='DEBUG', log_file='payroll.log', log_dir=str(tmp_path), use_colors=False)
    setup_logging(log_level='DEBUG', log_file='payroll.log', log_dir=str(tmp_path), use_colors=False)

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 2

    logging.getLogger('payroll.test').debug('salary updated')
    for handler in root.handlers:
        handler.flush()

    content = (tmp_path / 'payroll.log').read_text(encoding='utf-8')
    assert 'DEBUG - salary updated' in content
    assert '\033[' not in content


@pytest.mark.unit
def test_setup_logging_without_console(restore_root_logger):
    setup_logging(log_level='INFO', console_output=False)
    assert restore_root_logger.handlers == []

# ===============
# 2. SMOKE TESTS
# ===============


@pytest.mark.smoke
def test_smoke_config_singleton():
    assert isinstance(config, Config)
    assert config.payroll_db_name
