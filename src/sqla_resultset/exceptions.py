"""
Exception hierarchy for sqla-resultset.

All library errors inherit from ``ResultSetError`` and provide
``to_dict()`` for API-friendly error responses.  Errors raised by the
database driver or by SQLAlchemy itself are never wrapped: they reach
the caller unchanged.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any


class ResultSetError(Exception):
    """Base exception for all sqla-resultset errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class UsageError(ResultSetError):
    """The API was called with arguments it cannot work with."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "USAGE_ERROR",
            "message": str(self),
        }


class PagerError(UsageError):
    """A pager was requested on a result set that does not paginate."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "PAGER_ERROR",
            "message": str(self),
        }


class UnknownOperatorError(UsageError):
    """
    Unknown filter operator.

    Provides fuzzy-matched suggestions for likely intended operators.
    """

    def __init__(self, operator: str, valid_operators: list[str]) -> None:
        self.operator = operator
        self.valid_operators = valid_operators
        self.suggestions = get_close_matches(operator, valid_operators, n=3, cutoff=0.6)

        message = f"Unknown filter operator: '{operator}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        message += f" Valid operators: {', '.join(sorted(valid_operators))}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "OPERATOR_NOT_FOUND",
            "operator": self.operator,
            "suggestions": self.suggestions,
            "valid_operators": sorted(self.valid_operators),
        }


class UnsupportedBackendError(ResultSetError):
    """A feature is not available for the connected database backend."""

    def __init__(self, feature: str, backend: str) -> None:
        self.feature = feature
        self.backend = backend
        super().__init__(f"{feature} is not supported for the '{backend}' backend")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_BACKEND",
            "feature": self.feature,
            "backend": self.backend,
        }


__all__: list[str] = [
    "PagerError",
    "ResultSetError",
    "UnknownOperatorError",
    "UnsupportedBackendError",
    "UsageError",
]
