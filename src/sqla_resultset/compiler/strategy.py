"""
Filter operator compilation strategy.

Each operator accepted in a filter mapping is an isolated
``SQLOperator`` registered in an ``SQLOperatorRegistry``.  The filter
compiler looks operators up here by their normalized token.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ..exceptions import UnknownOperatorError
from ..operators import FilterOperator, normalize_operator

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement


class SQLOperator(ABC):
    """
    Strategy interface for compiling one filter operator
    into a SQLAlchemy ``ColumnElement[bool]``.
    """

    @property
    @abstractmethod
    def name(self) -> FilterOperator:
        """The operator this strategy handles."""
        ...

    @abstractmethod
    def apply(
        self,
        column: Any,
        value: Any,
    ) -> ColumnElement[bool]:
        """
        Build a SQLAlchemy filter clause.

        Args:
            column: A SQLAlchemy column or literal column expression.
            value: The operand from the filter mapping.

        Returns:
            A SQLAlchemy boolean expression.
        """
        ...


class SQLOperatorRegistry:
    """
    Registry of ``SQLOperator`` instances keyed by
    :class:`FilterOperator`.
    """

    def __init__(self) -> None:
        self._operators: dict[FilterOperator, SQLOperator] = {}

    def register(self, operator: SQLOperator) -> None:
        self._operators[operator.name] = operator

    def register_all(self, *operators: SQLOperator) -> None:
        for op in operators:
            self.register(op)

    def unregister(self, name: FilterOperator) -> None:
        self._operators.pop(name, None)

    def get(self, name: FilterOperator) -> SQLOperator | None:
        return self._operators.get(name)

    def has(self, name: FilterOperator) -> bool:
        return name in self._operators

    @property
    def supported_operators(self) -> set[FilterOperator]:
        return set(self._operators.keys())

    def resolve(self, raw: str) -> SQLOperator:
        """
        Look up the strategy for a raw operator token such as ``"-in"``.

        Raises:
            UnknownOperatorError: If no registered operator matches.
        """
        token = normalize_operator(raw)
        valid = sorted(op.value for op in self._operators)
        try:
            op = self._operators.get(FilterOperator(token))
        except ValueError:
            op = None
        if op is None:
            raise UnknownOperatorError(raw, valid)
        return op

    def apply(self, raw: str, column: Any, value: Any) -> ColumnElement[bool]:
        """Resolve ``raw`` and apply it to ``column`` / ``value``."""
        return self.resolve(raw).apply(column, value)
