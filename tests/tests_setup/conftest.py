"""
Shared fixtures and mocking helpers for setup/ tests.

Key fixtures:
- patch_create_engine: patches the engine factory used by create_database.
- dummy_sql_module: patches sql.ddl and sql.query_builder functions used by create_database.
- db_creator_factory: returns a DatabaseCreator instance wired to the patched engine.
- schema_creator: PayrollSchemaCreator on the in-memory SQLite engine.
"""

from unittest.mock import patch

import pytest


@pytest.fixture
def patch_create_engine():
    """
    Patch setup.create_database.create_sqlalchemy_engine and yield the mock.
    Tests set .return_value to a FakeEngine.
    """
    with patch("setup.create_database.create_sqlalchemy_engine") as mock_create_engine:
        yield mock_create_engine


@pytest.fixture
def dummy_sql_module(monkeypatch):
    """
    Patch the SQL builders used by create_database.
    Returns a dict of the strings they will return so tests can assert executed SQL.
    """
    payload = {
        "create_sql": 'CREATE DATABASE "dummydb" WITH TEMPLATE template0 ENCODING \'UTF8\';',
        "drop_sql": 'DROP DATABASE IF EXISTS "dummydb" WITH (FORCE);',
        "terminate_sql": "SELECT pg_terminate_backend(pid) FROM pg_stat_activity WHERE datname = :database_name",
        "exists_sql": "SELECT 1 FROM pg_database WHERE datname = :database_name",
        "count_conn_sql": "SELECT count(*) FROM pg_stat_activity WHERE datname = :database_name"
    }

    monkeypatch.setattr("setup.create_database.create_database_sql", lambda **kwargs: payload["create_sql"])
    monkeypatch.setattr("setup.create_database.drop_database_sql", lambda **kwargs: payload["drop_sql"])
    monkeypatch.setattr("setup.create_database.terminate_connections_sql", lambda: payload["terminate_sql"])
    monkeypatch.setattr("setup.create_database.check_database_exists_sql", lambda: payload["exists_sql"])
    monkeypatch.setattr("setup.create_database.count_database_connections_sql", lambda: payload["count_conn_sql"])

    return payload


@pytest.fixture
def db_creator_factory():
    """
    Factory that creates a DatabaseCreator with default params. Tests patch the engine separately.
    """
    from setup.create_database import DatabaseCreator

    def factory(**overrides):
        params = dict(
            host="localhost",
            port=5432,
            user="postgres",
            password="secret",
            admin_db="postgres",
            target_db="dummydb"
        )
        params.update(overrides)
        return DatabaseCreator(**params)

    return factory


@pytest.fixture
def schema_creator(sqlite_engine):
    """PayrollSchemaCreator sharing the SQLite engine (tables already created)."""
    from setup.create_tables import PayrollSchemaCreator

    return PayrollSchemaCreator(engine=sqlite_engine)
