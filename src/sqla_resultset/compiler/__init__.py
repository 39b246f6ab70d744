"""
Filter and clause compilation onto SQLAlchemy Core.

Public API:
    - ``build_where(where)`` — compile a filter mapping to a
      ``ColumnElement[bool]`` (or ``None`` for an empty filter)
    - ``resolve_table`` / ``resolve_fields`` / ``resolve_order_by`` —
      table, SELECT list and ORDER BY resolution
    - ``DEFAULT_REGISTRY`` — the default operator registry
    - ``SQLOperator`` / ``SQLOperatorRegistry`` — extension points for
      custom operators
"""

from .columns import resolve_column, resolve_fields, resolve_order_by, resolve_table
from .filters import build_where
from .operators import DEFAULT_REGISTRY, build_default_registry
from .strategy import SQLOperator, SQLOperatorRegistry

__all__ = [
    "build_where",
    "resolve_column",
    "resolve_fields",
    "resolve_order_by",
    "resolve_table",
    "DEFAULT_REGISTRY",
    "build_default_registry",
    "SQLOperator",
    "SQLOperatorRegistry",
]
