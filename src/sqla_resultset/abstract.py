"""
SQL generation on top of SQLAlchemy Core.

``SQLAbstract`` turns ``(table, fields, where, order_by, limit, offset)``
into SELECT / INSERT / UPDATE / DELETE constructs and wraps each one in a
:class:`Statement`, which can be executed as-is or unpacked into the
rendered ``(sql, bind_values)`` pair for the target dialect::

    abstract = SQLAbstract(engine.dialect)
    sql, bind = abstract.select("users", ["user_id"], {"status": 0})
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, literal_column, select, update
from sqlalchemy.engine.default import DefaultDialect

from .compiler import (
    DEFAULT_REGISTRY,
    build_where,
    resolve_column,
    resolve_fields,
    resolve_order_by,
    resolve_table,
)
from .exceptions import UsageError

if TYPE_CHECKING:
    from sqlalchemy.engine import Dialect
    from sqlalchemy.sql import Executable
    from sqlalchemy.sql.compiler import Compiled

    from .compiler import SQLOperatorRegistry


def _bind_values(compiled: Compiled) -> tuple[Any, ...]:
    params = compiled.params
    names = getattr(compiled, "positiontup", None)
    if names is None:
        names = list(params)
    return tuple(params[name] for name in names)


@dataclass(frozen=True, eq=False)
class Statement:
    """
    A generated statement bound to a dialect.

    Attributes:
        clause: The SQLAlchemy construct; this is what gets executed.
        dialect: Dialect used to render ``sql`` and ``bind``.
        bind_order: Explicit parameter order for positional re-execution
            (see :class:`~sqla_resultset.prepared.PreparedStatement`);
            empty means the compiled order.
    """

    clause: Executable
    dialect: Dialect = field(repr=False)
    bind_order: tuple[str, ...] = ()

    @cached_property
    def _rendered(self) -> Compiled:
        return self.clause.compile(
            dialect=self.dialect,
            compile_kwargs={"render_postcompile": True},
        )

    @property
    def sql(self) -> str:
        """SQL text in the dialect's paramstyle."""
        return str(self._rendered)

    @property
    def bind(self) -> tuple[Any, ...]:
        """Bind values in the order their placeholders appear in ``sql``."""
        return _bind_values(self._rendered)

    @property
    def params(self) -> dict[str, Any]:
        """Named bind values, as accepted by ``Connection.execute``."""
        return dict(self.clause.compile(dialect=self.dialect).params)

    @property
    def bind_names(self) -> tuple[str, ...]:
        """
        Parameter names accepted on re-execution, one per bound value of
        the unexpanded statement.

        An ``IN`` list is a single expanding parameter here and takes a
        list, while ``bind`` has one entry per list item.
        """
        return self.bind_order or tuple(self.params)

    def __iter__(self) -> Iterator[Any]:
        # sql, bind = statement
        return iter((self.sql, self.bind))


class SQLAbstract:
    """
    Stateless SQL generator shared by every result set of a connector.

    Args:
        dialect: Dialect statements are rendered for.  Defaults to
            SQLAlchemy's generic dialect (named ``:param`` style).
        registry: Operator registry used to compile filters.
    """

    def __init__(
        self,
        dialect: Dialect | None = None,
        *,
        registry: SQLOperatorRegistry | None = None,
    ) -> None:
        self.dialect: Dialect = dialect if dialect is not None else DefaultDialect()
        self.registry = registry or DEFAULT_REGISTRY

    # -- SELECT -------------------------------------------------------------

    def select(
        self,
        table: str,
        fields: str | Sequence[str] | None = None,
        where: Mapping[str, Any] | None = None,
        order_by: Any = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Statement:
        stmt = select(*resolve_fields(fields)).select_from(resolve_table(table))
        condition = build_where(where, registry=self.registry)
        if condition is not None:
            stmt = stmt.where(condition)
        ordering = resolve_order_by(order_by)
        if ordering:
            stmt = stmt.order_by(*ordering)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset is not None:
            stmt = stmt.offset(offset)
        return self._statement(stmt)

    def count(
        self,
        table: str,
        where: Mapping[str, Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Statement:
        """
        ``SELECT count(*)`` over ``table`` filtered by ``where``.

        With ``limit`` / ``offset`` the rows of that window are counted,
        so the result matches the number of rows a SELECT would return.
        """
        tbl = resolve_table(table)
        condition = build_where(where, registry=self.registry)
        if limit is None and offset is None:
            stmt = select(func.count().label("count")).select_from(tbl)
            if condition is not None:
                stmt = stmt.where(condition)
            return self._statement(stmt)

        window = select(literal_column("1").label("one")).select_from(tbl)
        if condition is not None:
            window = window.where(condition)
        if limit is not None:
            window = window.limit(limit)
        if offset is not None:
            window = window.offset(offset)
        stmt = select(func.count().label("count")).select_from(window.subquery())
        return self._statement(stmt)

    # -- DML ----------------------------------------------------------------

    def insert(self, table: str, fields: Mapping[str, Any]) -> Statement:
        names = self._field_names(fields, "insert")
        tbl = resolve_table(table, *(resolve_column(n) for n in names))
        stmt = insert(tbl).values({name: fields[name] for name in names})
        return self._statement(stmt, bind_order=tuple(names))

    def insert_prototype(
        self, table: str, fields: Sequence[str] | Mapping[str, Any]
    ) -> Statement:
        """
        INSERT with one named placeholder per field and no baked values.

        Meant for repeated execution; the columns are ordered like
        :meth:`values` orders bind values.
        """
        names = self._field_names(fields, "insert")
        tbl = resolve_table(table, *(resolve_column(n) for n in names))
        return self._statement(insert(tbl), bind_order=tuple(names))

    def update(
        self,
        table: str,
        fields: Mapping[str, Any],
        where: Mapping[str, Any] | None = None,
    ) -> Statement:
        names = self._field_names(fields, "update")
        tbl = resolve_table(table, *(resolve_column(n) for n in names))
        stmt = update(tbl).values({name: fields[name] for name in names})
        condition = build_where(where, registry=self.registry)
        if condition is not None:
            stmt = stmt.where(condition)
        return self._statement(stmt)

    def delete(self, table: str, where: Mapping[str, Any] | None = None) -> Statement:
        stmt = delete(resolve_table(table))
        condition = build_where(where, registry=self.registry)
        if condition is not None:
            stmt = stmt.where(condition)
        return self._statement(stmt)

    def where(self, where: Mapping[str, Any] | None) -> tuple[str, tuple[Any, ...]]:
        """
        Render only the WHERE clause: ``(" WHERE ...", bind)``.

        An empty filter renders as ``("", ())``.
        """
        condition = build_where(where, registry=self.registry)
        if condition is None:
            return "", ()
        compiled = condition.compile(
            dialect=self.dialect,
            compile_kwargs={"render_postcompile": True},
        )
        return f" WHERE {compiled}", _bind_values(compiled)

    def values(self, fields: Mapping[str, Any]) -> tuple[Any, ...]:
        """Bind values of ``fields`` in the column order used for INSERT."""
        return tuple(fields[name] for name in self._field_names(fields, "insert"))

    # -- internals ----------------------------------------------------------

    @staticmethod
    def _field_names(
        fields: Sequence[str] | Mapping[str, Any], verb: str
    ) -> list[str]:
        if isinstance(fields, str):
            raise UsageError(f"{verb} expects a mapping or a list of field names")
        names = sorted(fields)
        if not names:
            raise UsageError(f"Nothing to {verb}: no fields given")
        return names

    def _statement(
        self, stmt: Executable, bind_order: tuple[str, ...] = ()
    ) -> Statement:
        return Statement(stmt, self.dialect, bind_order)
