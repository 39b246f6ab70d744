"""Tests for Connector construction, units of work and execution."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError

from sqla_resultset import (
    Connector,
    ConnectorSettings,
    ResultSet,
    RowShape,
    UnsupportedBackendError,
    UsageError,
)

# -- Construction ------------------------------------------------------------


def test_connector_from_engine(engine):
    connector = Connector(engine)

    assert connector.engine is engine
    assert connector.dialect_name == "sqlite"
    assert connector.abstract.dialect is engine.dialect


def test_connector_from_dsn_with_credentials():
    connector = Connector("sqlite:///app.db", "scott", "tiger")

    assert connector.engine.url.username == "scott"
    assert connector.engine.url.password == "tiger"


def test_connector_forwards_engine_options():
    connector = Connector("sqlite://", echo=True)
    assert connector.engine.echo is True


def test_connector_from_settings():
    settings = ConnectorSettings(url="sqlite://", echo=True)
    connector = Connector(settings)

    assert connector.engine.echo is True
    assert connector.dialect_name == "sqlite"


def test_connector_from_env(monkeypatch):
    monkeypatch.setenv("APP_DB_URL", "sqlite://")
    connector = Connector.from_env("APP_DB_")
    assert connector.dialect_name == "sqlite"


@pytest.mark.parametrize("target", [None, "", 42])
def test_connector_requires_a_target(target):
    with pytest.raises(UsageError):
        Connector(target)


def test_credentials_cannot_accompany_an_engine(engine):
    with pytest.raises(UsageError):
        Connector(engine, "scott")
    with pytest.raises(UsageError):
        Connector(engine, pool_pre_ping=True)


def test_credentials_cannot_accompany_settings():
    with pytest.raises(UsageError):
        Connector(ConnectorSettings(url="sqlite://"), "scott")


def test_resultset_factory(connector: Connector):
    rs = connector.resultset("users")

    assert isinstance(rs, ResultSet)
    assert rs.connector is connector
    assert rs.where == {}


def test_context_manager_disposes(engine, monkeypatch):
    connector = Connector(engine)
    disposed = []
    monkeypatch.setattr(connector, "dispose", lambda: disposed.append(True))

    with connector as entered:
        assert entered is connector
    assert disposed == [True]


# -- Units of work -----------------------------------------------------------


def test_execute_scalar(connector: Connector):
    assert connector.execute(text("SELECT 1"), RowShape.SCALAR) == 1


def test_run_reuses_enclosing_connection(connector: Connector):
    def outer(conn):
        return connector.run(lambda inner: inner is conn)

    assert connector.run(outer) is True


def test_txn_commits(users: ResultSet):
    connector = users.connector
    connector.txn(lambda _conn: users.insert({"user_name": "frank"}))
    assert users.count() == 6


def test_txn_rolls_back_on_error(users: ResultSet):
    connector = users.connector

    def work(_conn):
        users.insert({"user_name": "frank"})
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        connector.txn(work)
    assert users.count() == 5


def test_nested_txn_joins_outer(users: ResultSet):
    connector = users.connector

    def outer(conn):
        users.insert({"user_name": "frank"})
        connector.txn(lambda _conn: users.insert({"user_name": "gina"}))
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        connector.txn(outer)
    assert users.count() == 5


def test_savepoint_rolls_back_only_inner_work(users: ResultSet):
    connector = users.connector

    def inner(_conn):
        users.insert({"user_name": "gina"})
        raise ValueError("inner")

    def outer(_conn):
        users.insert({"user_name": "frank"})
        with pytest.raises(ValueError, match="inner"):
            connector.savepoint(inner)

    connector.txn(outer)

    assert users.search({"user_name": "frank"}).count() == 1
    assert users.search({"user_name": "gina"}).count() == 0


def test_savepoint_outside_transaction(users: ResultSet):
    connector = users.connector
    connector.savepoint(lambda _conn: users.insert({"user_name": "frank"}))
    assert users.count() == 6


def test_database_errors_propagate_unchanged(users: ResultSet):
    with pytest.raises(OperationalError):
        users.connector.resultset("no_such_table").count()


# -- Backend-specific --------------------------------------------------------


def test_last_insert_id_unsupported_backend(connector: Connector, monkeypatch):
    monkeypatch.setattr(connector.engine.dialect, "name", "postgresql")

    with pytest.raises(UnsupportedBackendError) as exc_info:
        connector.last_insert_id()
    assert exc_info.value.backend == "postgresql"


def test_connector_repr():
    connector = Connector(create_engine("sqlite:///app.db"))
    assert "sqlite" in repr(connector)
