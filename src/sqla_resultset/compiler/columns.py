"""
Column, field-list and ordering resolution.

Tables are addressed by name only (no reflection), so columns are
lightweight ``column()`` constructs.  Anything that is not a plain or
dotted identifier is treated as an SQL expression and rendered
verbatim through ``literal_column``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import asc, column, desc, literal_column, table
from sqlalchemy.sql.expression import ColumnClause, TableClause

from ..exceptions import UsageError

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_identifier(name: str) -> bool:
    return bool(_IDENTIFIER_RE.match(name))


def resolve_table(name: str, *columns: ColumnClause[Any]) -> TableClause:
    """Build a ``TableClause`` for ``name`` (``schema.table`` is honoured)."""
    if not name:
        raise UsageError("A table name is required")
    if "." in name:
        schema, _, table_name = name.rpartition(".")
        return table(table_name, *columns, schema=schema)
    return table(name, *columns)


def resolve_column(name: str) -> ColumnClause[Any]:
    """Resolve a filter key or field name to a column expression."""
    if is_identifier(name):
        return column(name)
    # dotted names and expressions are rendered as written
    return literal_column(name)


def resolve_fields(fields: str | Sequence[str] | None) -> list[ColumnClause[Any]]:
    """
    Resolve the fields of a SELECT.

    ``None`` and ``"*"`` select every column; a string selects a single
    column or expression; a sequence selects each entry in order.
    """
    if fields is None:
        return [literal_column("*")]
    if isinstance(fields, str):
        fields = [fields]
    resolved = [
        literal_column("*") if field == "*" else resolve_column(field)
        for field in fields
    ]
    if not resolved:
        raise UsageError("At least one field must be selected")
    return resolved


def _order_item(spec: str) -> Any:
    if spec.startswith("-"):
        return desc(resolve_column(spec[1:]))
    return asc(resolve_column(spec))


def resolve_order_by(order_by: Any) -> list[Any]:
    """
    Resolve an ``order_by`` clause into SQLAlchemy ordering expressions.

    Accepts ``"name"``, ``"-created"`` (descending), a list of those,
    or ``{"-asc": ...}`` / ``{"-desc": ...}`` mappings whose value is a
    column name or list of names.
    """
    if order_by is None:
        return []
    if isinstance(order_by, str):
        return [_order_item(order_by)]
    if isinstance(order_by, Mapping):
        items: list[Any] = []
        for direction in sorted(order_by):
            names = order_by[direction]
            if isinstance(names, str):
                names = [names]
            token = direction.lstrip("-").lower()
            if token == "asc":
                items.extend(asc(resolve_column(n)) for n in names)
            elif token == "desc":
                items.extend(desc(resolve_column(n)) for n in names)
            else:
                raise UsageError(
                    f"Unknown order_by direction '{direction}' (use -asc or -desc)"
                )
        return items
    if isinstance(order_by, Sequence):
        items = []
        for entry in order_by:
            items.extend(resolve_order_by(entry))
        return items
    raise UsageError(f"Unsupported order_by value: {order_by!r}")
