"""
Built-in filter operators and the default registry.

Usage::

    from sqla_resultset.compiler.operators import DEFAULT_REGISTRY

    expr = DEFAULT_REGISTRY.apply("-in", column, [1, 2, 3])
"""

from __future__ import annotations

from ..strategy import SQLOperatorRegistry
from .set import BetweenOperator, InOperator, NotBetweenOperator, NotInOperator
from .standard import (
    ColumnMethodOperator,
    ComparisonOperator,
    column_method_operators,
    comparison_operators,
)


def build_default_registry() -> SQLOperatorRegistry:
    """Create a registry with all built-in filter operators."""
    registry = SQLOperatorRegistry()
    registry.register_all(*comparison_operators())
    registry.register_all(
        InOperator(),
        NotInOperator(),
        BetweenOperator(),
        NotBetweenOperator(),
    )
    registry.register_all(*column_method_operators())
    return registry


DEFAULT_REGISTRY: SQLOperatorRegistry = build_default_registry()

__all__ = [
    "DEFAULT_REGISTRY",
    "ColumnMethodOperator",
    "ComparisonOperator",
    "SQLOperatorRegistry",
    "build_default_registry",
]
