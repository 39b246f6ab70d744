"""
Table-driven operators.

Comparisons map a filter token to a Python binary operator applied to
the column; pattern and NULL checks map it to a column method.  A
``Select`` operand of a comparison is compared as a scalar subquery::

    {"age": {">": select(func.avg(column("age"))).select_from(table("users"))}}
"""

from __future__ import annotations

import operator
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy.sql import Select

from ...operators import FilterOperator
from ..strategy import SQLOperator

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.sql.elements import ColumnElement


class ComparisonOperator(SQLOperator):
    """
    Binary comparison, e.g.
    ``ComparisonOperator(FilterOperator.GT, operator.gt)``.
    """

    def __init__(
        self, name: FilterOperator, compare: Callable[[Any, Any], Any]
    ) -> None:
        self._name = name
        self._compare = compare

    @property
    def name(self) -> FilterOperator:
        return self._name

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        if isinstance(value, Select):
            value = value.scalar_subquery()
        # == None / != None compile to IS NULL / IS NOT NULL
        return cast("ColumnElement[bool]", self._compare(column, value))


class ColumnMethodOperator(SQLOperator):
    """Operator implemented by a column method, e.g. ``like`` or ``is_``."""

    def __init__(self, name: FilterOperator, method: str) -> None:
        self._name = name
        self._method = method

    @property
    def name(self) -> FilterOperator:
        return self._name

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", getattr(column, self._method)(value))


COMPARISONS: dict[FilterOperator, Callable[[Any, Any], Any]] = {
    FilterOperator.EQ: operator.eq,
    FilterOperator.NE: operator.ne,
    FilterOperator.GT: operator.gt,
    FilterOperator.LT: operator.lt,
    FilterOperator.GE: operator.ge,
    FilterOperator.LE: operator.le,
}

COLUMN_METHODS: dict[FilterOperator, str] = {
    FilterOperator.LIKE: "like",
    FilterOperator.NOT_LIKE: "not_like",
    FilterOperator.ILIKE: "ilike",
    FilterOperator.NOT_ILIKE: "not_ilike",
    FilterOperator.IS: "is_",
    FilterOperator.IS_NOT: "is_not",
}


def comparison_operators() -> list[SQLOperator]:
    return [ComparisonOperator(name, fn) for name, fn in COMPARISONS.items()]


def column_method_operators() -> list[SQLOperator]:
    return [ColumnMethodOperator(name, m) for name, m in COLUMN_METHODS.items()]
