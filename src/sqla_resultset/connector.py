"""
Connector — the only component that talks to the database.

A ``Connector`` owns a pooled SQLAlchemy ``Engine`` and a single shared
:class:`~sqla_resultset.abstract.SQLAbstract`, hands out result sets and
runs units of work::

    connector = Connector("postgresql+psycopg://db/app", "app", "secret")
    users = connector.resultset("users")

    connector.run(lambda conn: conn.execute(text("SELECT 1")).scalar())
    connector.txn(lambda conn: users.insert({"user_name": "jsmith"}))

Nested ``run`` / ``txn`` / ``savepoint`` calls in the same thread or task
share the connection of the outermost call, so result-set methods used
inside ``txn`` take part in that transaction.

Reconnect and retry policies are not implemented here; enable
``pool_pre_ping`` on the engine to have stale pooled connections
replaced before use.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url

from .abstract import SQLAbstract, Statement
from .exceptions import UnsupportedBackendError, UsageError
from .prepared import PreparedStatement
from .resultset import ResultSet
from .settings import DEFAULT_ENV_PREFIX, ConnectorSettings
from .shaping import RowShape, shape_result

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping, Sequence
    from types import TracebackType

    from sqlalchemy.engine import Connection
    from sqlalchemy.sql import Executable

T = TypeVar("T")

logger = logging.getLogger("sqla_resultset.connector")

_LAST_INSERT_ID_SQL: dict[str, str] = {
    "sqlite": "SELECT last_insert_rowid()",
    "mysql": "SELECT LAST_INSERT_ID()",
    "mariadb": "SELECT LAST_INSERT_ID()",
}

DEFAULT_STREAM_BATCH_SIZE = 1000


class Connector:
    """
    Pooled connection plus SQL generator, and factory of result sets.

    Accepts exactly one of:

    * a DSN (SQLAlchemy URL string or ``URL``) with optional ``user`` and
      ``password`` overriding the URL credentials;
    * an already constructed ``Engine``;
    * a :class:`ConnectorSettings` instance.

    Extra keyword arguments are forwarded to ``create_engine``.

    Raises:
        UsageError: If no connection target is given, or credentials are
            combined with an ``Engine``.
    """

    def __init__(
        self,
        dsn: str | URL | Engine | ConnectorSettings | None = None,
        user: str | None = None,
        password: str | None = None,
        *,
        abstract: SQLAbstract | None = None,
        **engine_options: Any,
    ) -> None:
        self.engine: Engine = self._normalize(dsn, user, password, engine_options)
        self.abstract = abstract or SQLAbstract(self.engine.dialect)
        self._connection: ContextVar[Connection | None] = ContextVar(
            f"sqla_resultset_connection_{id(self)}",
            default=None,
        )

    @staticmethod
    def _normalize(
        dsn: str | URL | Engine | ConnectorSettings | None,
        user: str | None,
        password: str | None,
        engine_options: dict[str, Any],
    ) -> Engine:
        if isinstance(dsn, Engine):
            if user is not None or password is not None or engine_options:
                raise UsageError(
                    "Credentials and engine options cannot be applied to an "
                    "existing Engine; configure the Engine instead."
                )
            return dsn

        if isinstance(dsn, ConnectorSettings):
            if user is not None or password is not None:
                raise UsageError(
                    "Pass credentials through ConnectorSettings, not alongside it."
                )
            options = {**dsn.engine_options(), **engine_options}
            logger.debug("Creating engine for %s", dsn.to_url())
            return create_engine(dsn.to_url(), **options)

        if isinstance(dsn, str | URL) and str(dsn):
            url = make_url(dsn)
            if user is not None:
                url = url.set(username=user)
            if password is not None:
                url = url.set(password=password)
            logger.debug("Creating engine for %s", url)
            return create_engine(url, **engine_options)

        raise UsageError(
            "Connector requires a DSN, an Engine or ConnectorSettings. "
            "Use Connector(dsn, user, password) or Connector(engine)."
        )

    @classmethod
    def from_env(
        cls, prefix: str = DEFAULT_ENV_PREFIX, **engine_options: Any
    ) -> Connector:
        """Build a connector from :meth:`ConnectorSettings.from_env`."""
        return cls(ConnectorSettings.from_env(prefix), **engine_options)

    # -- properties ---------------------------------------------------------

    @property
    def dialect_name(self) -> str:
        """Backend name, e.g. ``"sqlite"``, ``"postgresql"``, ``"mysql"``."""
        return self.engine.dialect.name

    # -- factory ------------------------------------------------------------

    def resultset(self, table: str) -> ResultSet:
        """Return an unfiltered result set over ``table``."""
        return ResultSet(connector=self, table=table)

    # -- units of work ------------------------------------------------------

    def run(self, fn: Callable[[Connection], T]) -> T:
        """
        Call ``fn(connection)`` and return its result.

        Inside an enclosing ``run`` / ``txn`` / ``savepoint`` the
        enclosing connection is reused.  Otherwise a connection is checked
        out of the pool, committed when ``fn`` returns and rolled back
        when it raises.
        """
        current = self._connection.get()
        if current is not None:
            return fn(current)

        with self.engine.connect() as conn:
            token = self._connection.set(conn)
            try:
                result = fn(conn)
                conn.commit()
                return result
            finally:
                self._connection.reset(token)

    def txn(self, fn: Callable[[Connection], T]) -> T:
        """
        Call ``fn(connection)`` inside a transaction.

        A ``txn`` nested in another transaction joins it; the outermost
        one commits on success and rolls back on error.
        """
        current = self._connection.get()
        if current is not None:
            if current.in_transaction():
                return fn(current)
            logger.debug("Beginning transaction on the active connection")
            with current.begin():
                return fn(current)

        logger.debug("Beginning transaction")
        with self.engine.begin() as conn:
            token = self._connection.set(conn)
            try:
                return fn(conn)
            finally:
                self._connection.reset(token)

    def savepoint(self, fn: Callable[[Connection], T]) -> T:
        """
        Call ``fn(connection)`` inside a SAVEPOINT.

        When ``fn`` raises only the work since the savepoint is rolled
        back and the error propagates.  Outside a transaction a new
        transaction is opened around the savepoint.
        """
        current = self._connection.get()
        if current is None:
            return self.txn(lambda _conn: self.savepoint(fn))

        logger.debug("Creating savepoint")
        with current.begin_nested():
            return fn(current)

    # -- execution ----------------------------------------------------------

    def execute(
        self,
        statement: Statement | Executable,
        shape: RowShape = RowShape.NONE,
        *,
        params: Mapping[str, Any] | Sequence[Mapping[str, Any]] | None = None,
        key: str | None = None,
    ) -> Any:
        """
        Execute ``statement`` and shape its result.

        Database errors propagate unchanged.
        """
        clause = statement.clause if isinstance(statement, Statement) else statement

        def work(conn: Connection) -> Any:
            if logger.isEnabledFor(logging.DEBUG):
                sql = statement.sql if isinstance(statement, Statement) else clause
                logger.debug("Executing %s", sql)
            if params is None:
                result = conn.execute(clause)
            else:
                result = conn.execute(clause, params)
            return shape_result(result, shape, key=key)

        return self.run(work)

    def stream(
        self,
        statement: Statement | Executable,
        *,
        params: Mapping[str, Any] | None = None,
        batch_size: int = DEFAULT_STREAM_BATCH_SIZE,
    ) -> Iterator[dict[str, Any]]:
        """
        Yield rows of ``statement`` as dicts, fetching ``batch_size`` rows
        per round trip.

        The connection stays checked out until the iterator is exhausted
        or closed.
        """
        clause = statement.clause if isinstance(statement, Statement) else statement
        options = {"yield_per": batch_size}

        current = self._connection.get()
        if current is not None:
            result = current.execute(clause, params, execution_options=options)
            for row in result.mappings():
                yield dict(row)
            return

        with self.engine.connect() as conn:
            result = conn.execute(clause, params, execution_options=options)
            for row in result.mappings():
                yield dict(row)

    def prepare(self, statement: Statement) -> PreparedStatement:
        """Return a reusable handle for ``statement``."""
        return PreparedStatement(self, statement)

    def last_insert_id(self) -> Any:
        """
        Return the auto-increment key generated by the last INSERT on the
        current connection.

        Only meaningful on the connection that ran the INSERT: call it
        inside the same ``txn``.

        Raises:
            UnsupportedBackendError: For backends other than SQLite and
                MySQL / MariaDB.
        """
        sql = _LAST_INSERT_ID_SQL.get(self.dialect_name)
        if sql is None:
            raise UnsupportedBackendError(
                "Auto-increment key retrieval", self.dialect_name
            )
        return self.run(lambda conn: conn.execute(text(sql)).scalar())

    # -- lifecycle ----------------------------------------------------------

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()

    def __enter__(self) -> Connector:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.engine.url!r})"
