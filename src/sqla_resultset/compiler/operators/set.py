"""Set and range operators: in, not_in, between, not_between."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy.sql import Select

from ...exceptions import UsageError
from ...operators import FilterOperator
from ..strategy import SQLOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


def _set_operand(value: Any) -> Any:
    # a Select is used as a subquery; a lone scalar is a one-item set
    if isinstance(value, Select | list | tuple | set | frozenset):
        return value
    return [value]


def _range_bounds(op: FilterOperator, value: Any) -> tuple[Any, Any]:
    if not isinstance(value, list | tuple) or len(value) != 2:
        raise UsageError(f"'{op.value}' expects a [low, high] pair, got {value!r}")
    return value[0], value[1]


class InOperator(SQLOperator):
    """``{"user_id": {"-in": [1, 2]}}``, or a ``Select`` for ``IN (SELECT ...)``."""

    @property
    def name(self) -> FilterOperator:
        return FilterOperator.IN

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.in_(_set_operand(value)))


class NotInOperator(SQLOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.NOT_IN

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.not_in(_set_operand(value)))


class BetweenOperator(SQLOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.BETWEEN

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        low, high = _range_bounds(self.name, value)
        return cast("ColumnElement[bool]", column.between(low, high))


class NotBetweenOperator(SQLOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.NOT_BETWEEN

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        low, high = _range_bounds(self.name, value)
        return cast("ColumnElement[bool]", ~column.between(low, high))
