"""
Reusable statement handles.

A ``PreparedStatement`` pairs a generated statement with its connector
so a hot loop can execute it many times without regenerating SQL; the
engine's compiled-statement cache keeps the driver-level work down::

    sth = users.insert_sth(["user_name", "email"])
    for name in names:
        row = {"user_name": name, "email": f"{name}@example.com"}
        sth.execute(users.bind_values(row))
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy.sql import Select

from .exceptions import UsageError
from .shaping import RowShape

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from .abstract import Statement
    from .connector import Connector

Params = dict[str, Any] | list[dict[str, Any]] | None


class PreparedStatement:
    """
    Executable handle for a :class:`~sqla_resultset.abstract.Statement`.

    ``execute`` accepts:

    * no arguments — run with the values baked into the statement;
    * one mapping — named bind values;
    * one list of mappings — execute once per mapping (INSERT/UPDATE only);
    * positional values (or one tuple of them) — matched in order to
      :attr:`bind_names`.  An ``IN`` list is one value there::

          sth, _ = users.search({"user_id": {"-in": [1, 2]}}).select_sth()
          sth.execute([3, 5, 8])
    """

    __slots__ = ("_connector", "_statement")

    def __init__(self, connector: Connector, statement: Statement) -> None:
        self._connector = connector
        self._statement = statement

    @property
    def statement(self) -> Statement:
        return self._statement

    @property
    def sql(self) -> str:
        return self._statement.sql

    @property
    def bind_names(self) -> tuple[str, ...]:
        return self._statement.bind_names

    @property
    def is_select(self) -> bool:
        return isinstance(self._statement.clause, Select)

    def execute(self, *args: Any) -> list[dict[str, Any]] | None:
        """
        Execute the statement.

        Returns:
            Rows as dicts for a SELECT, ``None`` otherwise.
        """
        params = self._params(args)
        if self.is_select and isinstance(params, list):
            raise UsageError(
                "A SELECT cannot be executed with a list of parameter sets"
            )
        shape = RowShape.ARRAY_OF_HASHES if self.is_select else RowShape.NONE
        return self._connector.execute(  # type: ignore[no-any-return]
            self._statement, shape, params=params
        )

    def stream(
        self, *args: Any, batch_size: int | None = None
    ) -> Iterator[dict[str, Any]]:
        """Like :meth:`execute` for a SELECT, yielding rows lazily."""
        if not self.is_select:
            raise UsageError("Only SELECT statements can be streamed")
        params = self._params(args)
        if isinstance(params, list):
            raise UsageError(
                "A SELECT cannot be streamed with a list of parameter sets"
            )
        if batch_size is None:
            return self._connector.stream(self._statement, params=params)
        return self._connector.stream(
            self._statement, params=params, batch_size=batch_size
        )

    def _params(self, args: Sequence[Any]) -> Params:
        if not args:
            return None
        if len(args) == 1:
            (only,) = args
            if isinstance(only, Mapping):
                return dict(only)
            if (
                isinstance(only, list)
                and only
                and all(isinstance(p, Mapping) for p in only)
            ):
                return [dict(p) for p in only]
            if isinstance(only, tuple):
                args = only

        names = self.bind_names
        if len(args) != len(names):
            raise UsageError(
                f"Expected {len(names)} bind value(s) for "
                f"({', '.join(names)}), got {len(args)}"
            )
        return dict(zip(names, args, strict=True))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.sql!r})"
