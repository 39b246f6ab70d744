"""
Compile a filter mapping into a SQLAlchemy boolean expression.

A filter is a mapping of column (or SQL expression) to condition::

    {
        "status": 0,                        # status = 0
        "deleted_at": None,                 # deleted_at IS NULL
        "age": {">=": 18, "<": 65},         # age >= 18 AND age < 65
        "role": ["admin", "owner"],         # role = 'admin' OR role = 'owner'
        "user_id": {"-in": [1, 2, 3]},      # user_id IN (1, 2, 3)
        "created": text("> CURRENT_DATE"),  # literal SQL after the column
        "-or": [{"a": 1}, {"b": 2}],        # (a = 1 OR b = 2)
    }

Keys are walked in sorted order so that the generated SQL and the order
of its bind values do not depend on mapping insertion order.  Leaf
operators are delegated to an ``SQLOperatorRegistry``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, false, or_, text, true
from sqlalchemy.sql.elements import TextClause

from ..exceptions import UnknownOperatorError, UsageError
from ..operators import FilterOperator, normalize_operator
from .columns import resolve_column
from .operators import DEFAULT_REGISTRY

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from .strategy import SQLOperatorRegistry

_LOGICAL_KEYS = ("-and", "-or")


def build_where(
    where: Mapping[str, Any] | None,
    *,
    registry: SQLOperatorRegistry | None = None,
) -> ColumnElement[bool] | None:
    """
    Build the WHERE expression for ``where``.

    Returns ``None`` for an empty filter so callers can skip the WHERE
    clause entirely.
    """
    if not where:
        return None
    reg = registry or DEFAULT_REGISTRY
    return _compile_mapping(where, reg)


def _compile_mapping(
    where: Mapping[str, Any], registry: SQLOperatorRegistry
) -> ColumnElement[bool]:
    conditions = [
        _compile_key(key, where[key], registry) for key in sorted(where, key=str)
    ]
    if len(conditions) == 1:
        return conditions[0]
    return and_(*conditions)


def _compile_key(
    key: str, value: Any, registry: SQLOperatorRegistry
) -> ColumnElement[bool]:
    if key.startswith("-"):
        return _compile_logical(key, value, registry)
    return _compile_condition(key, value, registry)


def _compile_logical(
    key: str, value: Any, registry: SQLOperatorRegistry
) -> ColumnElement[bool]:
    token = normalize_operator(key)
    if token not in (FilterOperator.AND.value, FilterOperator.OR.value):
        raise UnknownOperatorError(key, list(_LOGICAL_KEYS))

    if isinstance(value, Mapping):
        parts = [
            _compile_key(k, value[k], registry) for k in sorted(value, key=str)
        ]
    elif isinstance(value, list | tuple):
        parts = []
        for item in value:
            if not isinstance(item, Mapping):
                raise UsageError(f"'{key}' expects a list of filter mappings")
            if item:
                parts.append(_compile_mapping(item, registry))
    else:
        raise UsageError(f"'{key}' expects a mapping or a list of mappings")

    if token == FilterOperator.AND.value:
        return and_(*parts) if parts else true()
    return or_(*parts) if parts else false()


def _compile_condition(
    key: str, value: Any, registry: SQLOperatorRegistry
) -> ColumnElement[bool]:
    column = resolve_column(key)

    if isinstance(value, TextClause):
        # keep the caller's bound values: text("> :min").bindparams(min=40)
        literal = text(f"{key} {value.text}")
        return literal.bindparams(*value._bindparams.values())

    if isinstance(value, Mapping):
        parts = [
            registry.apply(op, column, value[op]) for op in sorted(value, key=str)
        ]
        if not parts:
            return true()
        return parts[0] if len(parts) == 1 else and_(*parts)

    if isinstance(value, list | tuple):
        if not value:
            return false()
        alternatives = [_compile_condition(key, v, registry) for v in value]
        return alternatives[0] if len(alternatives) == 1 else or_(*alternatives)

    return registry.apply(FilterOperator.EQ.value, column, value)
