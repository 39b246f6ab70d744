"""
sqla-resultset: composable, immutable result sets over SQLAlchemy Core.

Quick start::

    from sqla_resultset import Connector

    connector = Connector("sqlite:///app.db")
    users = connector.resultset("users")

    active = users.search({"status": 0})
    active.count()
    active.search({}, {"page": 2, "rows": 20}).array_of_hash_rows()
"""

from .abstract import SQLAbstract, Statement
from .connector import Connector
from .exceptions import (
    PagerError,
    ResultSetError,
    UnknownOperatorError,
    UnsupportedBackendError,
    UsageError,
)
from .operators import FilterOperator
from .pager import Pager
from .prepared import PreparedStatement
from .resultset import ResultSet
from .settings import ConnectorSettings
from .shaping import RowShape

__version__ = "0.1.0"

__all__ = [
    # Core
    "Connector",
    "ResultSet",
    "Pager",
    # SQL generation
    "SQLAbstract",
    "Statement",
    "PreparedStatement",
    "FilterOperator",
    "RowShape",
    # Configuration
    "ConnectorSettings",
    # Exceptions
    "ResultSetError",
    "UsageError",
    "PagerError",
    "UnknownOperatorError",
    "UnsupportedBackendError",
]
