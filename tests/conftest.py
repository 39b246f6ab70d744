"""Shared fixtures: an in-memory SQLite database with a ``users`` table."""

from __future__ import annotations

from typing import Any

import pytest
from sqlalchemy import create_engine, event, text
from sqlalchemy.pool import StaticPool

from sqla_resultset import Connector, ResultSet

USERS: list[dict[str, Any]] = [
    {"user_name": "alice", "email": "alice@example.com", "status": 0, "age": 30},
    {"user_name": "bob", "email": "bob@example.com", "status": 0, "age": 17},
    {"user_name": "carol", "email": "carol@example.com", "status": 1, "age": 45},
    {"user_name": "dave", "email": None, "status": 0, "age": 52},
    {"user_name": "erin", "email": "erin@example.com", "status": 2, "age": 22},
]

CREATE_USERS = """
CREATE TABLE users (
    user_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_name TEXT NOT NULL,
    email TEXT,
    status INTEGER NOT NULL DEFAULT 0,
    age INTEGER
)
"""

INSERT_USER = text(
    "INSERT INTO users (user_name, email, status, age) "
    "VALUES (:user_name, :email, :status, :age)"
)


def _create_users(connector: Connector, rows: list[dict[str, Any]]) -> None:
    def work(conn: Any) -> None:
        conn.execute(text(CREATE_USERS))
        conn.execute(INSERT_USER, rows)

    connector.txn(work)


@pytest.fixture
def engine():
    """
    Single-connection in-memory SQLite engine.

    pysqlite's own transaction handling is switched off so that
    SAVEPOINT works; SQLAlchemy emits BEGIN itself.
    """
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, _record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    yield engine
    engine.dispose()


@pytest.fixture
def connector(engine) -> Connector:
    return Connector(engine)


@pytest.fixture
def users(connector: Connector) -> ResultSet:
    """Result set over five users with ids 1 to 5."""
    _create_users(connector, USERS)
    return connector.resultset("users")


@pytest.fixture
def crowd(connector: Connector) -> ResultSet:
    """Result set over 25 users, ``user01`` to ``user25``."""
    rows = [
        {
            "user_name": f"user{i:02d}",
            "email": f"user{i:02d}@example.com",
            "status": i % 2,
            "age": 20 + i,
        }
        for i in range(1, 26)
    ]
    _create_users(connector, rows)
    return connector.resultset("users")
