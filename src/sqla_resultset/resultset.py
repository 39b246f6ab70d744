"""
ResultSet — immutable query state for one table.

A result set holds a filter (``where``) and auxiliary clauses
(``order_by``, ``limit``, ``offset``, ``page``, ``rows``).  ``search``
never modifies a result set; it returns a new one with the merged state::

    users = connector.resultset("users")
    adults = users.search({"status": 0}).search({"age": {">=": 18}})

    adults.count()
    adults.array_of_hash_rows(["user_id", "email"])

    page = adults.search({}, {"page": 2, "rows": 50, "order_by": "-created"})
    page.pager.last_page
    page.array_of_hash_rows(["user_id", "email"])

Merging a key that is already filtered replaces the earlier condition
rather than combining with it: ``rs.search({"age": {">": 1}})`` followed
by ``.search({"age": {"<": 9}})`` filters on ``age < 9`` only.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any

from .exceptions import PagerError, UsageError
from .pager import DEFAULT_ENTRIES_PER_PAGE, Pager
from .shaping import RowShape

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .abstract import SQLAbstract, Statement
    from .connector import Connector
    from .prepared import PreparedStatement

logger = logging.getLogger("sqla_resultset.resultset")

CLAUSE_NAMES: frozenset[str] = frozenset(
    {"order_by", "limit", "offset", "page", "rows"}
)

PAGE_CLAUSES = ("page", "rows")

Fields = str | Sequence[str] | None


def _clone(value: Any) -> Any:
    """Copy containers recursively; leaves (scalars, SQL constructs) are shared."""
    if isinstance(value, Mapping):
        return {k: _clone(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_clone(v) for v in value]
    if isinstance(value, tuple):
        return tuple(_clone(v) for v in value)
    if isinstance(value, set):
        return {_clone(v) for v in value}
    return value


def _page_number(name: str, value: Any) -> int:
    """Coerce ``page`` / ``rows``, which often arrive as query-string text."""
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise PagerError(f"'{name}' must be an integer, got {value!r}") from exc


@dataclass(frozen=True)
class ResultSet:
    """
    Filter and clause state for ``table`` plus the methods that execute it.

    Instances are immutable: ``where`` and ``clauses`` are deep-copied on
    construction and never modified afterwards, so a result set may be
    read from any number of threads.  The lazily built :attr:`pager` is
    the exception: it is computed once per instance without locking, so
    its first access must not happen from several threads at once.
    """

    connector: Connector = field(repr=False, compare=False)
    table: str
    where: dict[str, Any] = field(default_factory=dict)
    clauses: dict[str, Any] = field(default_factory=dict)

    # where and clauses are dicts, so instances compare by value but are
    # not hashable
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if not self.table:
            raise UsageError("A result set requires a table name")
        unknown = sorted(set(self.clauses) - CLAUSE_NAMES)
        if unknown:
            raise UsageError(
                f"Unknown clause(s): {', '.join(unknown)}. "
                f"Valid clauses: {', '.join(sorted(CLAUSE_NAMES))}"
            )
        clauses = _clone(self.clauses)
        for name in PAGE_CLAUSES:
            if clauses.get(name) is not None:
                clauses[name] = _page_number(name, clauses[name])
        object.__setattr__(self, "where", _clone(self.where))
        object.__setattr__(self, "clauses", clauses)

    @property
    def filter(self) -> dict[str, Any]:
        """Alias of :attr:`where`."""
        return self.where

    @property
    def abstract(self) -> SQLAbstract:
        return self.connector.abstract

    # -- composition --------------------------------------------------------

    def search(
        self,
        where: Mapping[str, Any] | None = None,
        clauses: Mapping[str, Any] | None = None,
    ) -> ResultSet:
        """
        Return a new result set with ``where`` overlaid on this filter and
        ``clauses`` overlaid on these clauses.

        Keys given here win; every other key is kept.  This result set is
        left unmodified and no query is run.
        """
        where = where or {}
        clauses = clauses or {}

        new_where = dict(self.where)
        new_where.update(where)

        new_clauses: dict[str, Any] = {}
        for name in sorted(set(clauses) | set(self.clauses)):
            new_clauses[name] = clauses[name] if name in clauses else self.clauses[name]

        return type(self)(
            connector=self.connector,
            table=self.table,
            where=new_where,
            clauses=new_clauses,
        )

    # -- pagination ---------------------------------------------------------

    @property
    def is_paged(self) -> bool:
        return bool(self.clauses.get("page"))

    @cached_property
    def pager(self) -> Pager:
        """
        Pager for a paginating result set, built on first access.

        Raises:
            PagerError: If the result set has no ``page`` clause.
        """
        if not self.is_paged:
            raise PagerError(
                "pager can only be used on paginating result sets; "
                "search with a 'page' clause first"
            )
        unpaged = self.search({}, {"page": 0, "limit": None, "offset": None})
        pager = Pager(
            total_entries=unpaged.count(),
            entries_per_page=self.clauses.get("rows") or DEFAULT_ENTRIES_PER_PAGE,
            current_page=self.clauses["page"],
        )
        logger.debug(
            "Built pager for %s: %d entries, %d per page, page %d",
            self.table,
            pager.total_entries,
            pager.entries_per_page,
            pager.current_page,
        )
        return pager

    @property
    def total_entries(self) -> int:
        return self.pager.total_entries

    @property
    def last_page(self) -> int:
        return self.pager.last_page

    def _limit_offset(self) -> tuple[int | None, int | None]:
        if self.is_paged:
            return self.pager.entries_per_page, self.pager.skipped
        return self.clauses.get("limit"), self.clauses.get("offset")

    def _do_select(self, fields: Fields) -> Statement:
        limit, offset = self._limit_offset()
        return self.abstract.select(
            self.table,
            fields,
            self.where,
            self.clauses.get("order_by"),
            limit,
            offset,
        )

    # -- writes -------------------------------------------------------------

    def insert(self, fields: Mapping[str, Any]) -> None:
        """Insert one row.  The filter is ignored."""
        self.connector.execute(self.abstract.insert(self.table, fields))

    def update(self, fields: Mapping[str, Any]) -> None:
        """Set ``fields`` on every row matching the filter."""
        self.connector.execute(self.abstract.update(self.table, fields, self.where))

    def delete(self) -> None:
        """Delete every row matching the filter."""
        self.connector.execute(self.abstract.delete(self.table, self.where))

    def auto_pk(self) -> Any:
        """
        Auto-increment key generated by the last :meth:`insert` on this
        connection.  Use inside the ``txn`` that ran the insert.
        """
        return self.connector.last_insert_id()

    # -- reads --------------------------------------------------------------

    def array_row(self, fields: Fields = None) -> tuple[Any, ...]:
        """First matching row as a tuple, ``()`` when nothing matches."""
        return self.connector.execute(  # type: ignore[no-any-return]
            self._do_select(fields), RowShape.ARRAY_ROW
        )

    def hash_row(self, fields: Fields = None) -> dict[str, Any] | None:
        """First matching row as a dict, ``None`` when nothing matches."""
        return self.connector.execute(  # type: ignore[no-any-return]
            self._do_select(fields), RowShape.HASH_ROW
        )

    def array_of_array_rows(self, fields: Fields = None) -> list[tuple[Any, ...]]:
        return self.connector.execute(  # type: ignore[no-any-return]
            self._do_select(fields), RowShape.ARRAY_OF_ARRAYS
        )

    def array_of_hash_rows(self, fields: Fields = None) -> list[dict[str, Any]]:
        return self.connector.execute(  # type: ignore[no-any-return]
            self._do_select(fields), RowShape.ARRAY_OF_HASHES
        )

    def hash_of_hash_rows(
        self, key: str, fields: Fields = None
    ) -> dict[Any, dict[str, Any]]:
        """
        Rows as dicts, indexed by the value of column ``key``.

        When several rows share a key value the last one wins.
        """
        return self.connector.execute(  # type: ignore[no-any-return]
            self._do_select(fields), RowShape.HASH_OF_HASHES, key=key
        )

    def column(self, name: str) -> list[Any]:
        """Values of one column across all matching rows."""
        return self.connector.execute(  # type: ignore[no-any-return]
            self._do_select(name), RowShape.COLUMN
        )

    def count(self) -> int:
        """
        Number of matching rows.

        On a paginating result set this is the number of rows on the
        current page, taken from the pager without another query.
        """
        if self.is_paged:
            return self.pager.entries_on_this_page
        limit, offset = self._limit_offset()
        stmt = self.abstract.count(self.table, self.where, limit, offset)
        return int(self.connector.execute(stmt, RowShape.SCALAR))

    def stream(
        self, fields: Fields = None, *, batch_size: int | None = None
    ) -> Iterator[dict[str, Any]]:
        """Iterate matching rows as dicts without buffering the whole result."""
        statement = self._do_select(fields)
        if batch_size is None:
            return self.connector.stream(statement)
        return self.connector.stream(statement, batch_size=batch_size)

    # -- statement handles --------------------------------------------------

    def select_sth(
        self, fields: Fields = None
    ) -> tuple[PreparedStatement, dict[str, Any]]:
        """
        Prepared SELECT plus its bind values::

            sth, params = rs.select_sth(["user_name", "user_id"])
            for row in sth.execute(params):
                ...
        """
        statement = self._do_select(fields)
        return self.connector.prepare(statement), statement.params

    def insert_sth(
        self, fields: Sequence[str] | Mapping[str, Any]
    ) -> PreparedStatement:
        """
        Prepared INSERT for the given columns, for inserting many rows
        without regenerating SQL.  Pair with :meth:`bind_values`.
        """
        statement = self.abstract.insert_prototype(self.table, fields)
        return self.connector.prepare(statement)

    def bind_values(self, fields: Mapping[str, Any]) -> tuple[Any, ...]:
        """Values of ``fields`` in the column order :meth:`insert_sth` uses."""
        return self.abstract.values(fields)
