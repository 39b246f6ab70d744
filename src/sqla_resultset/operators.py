from __future__ import annotations

from enum import Enum


class FilterOperator(str, Enum):
    """Operators accepted inside a ``{column: {operator: operand}}`` filter."""

    # Comparison
    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="

    # Sets and ranges
    IN = "in"
    NOT_IN = "not_in"
    BETWEEN = "between"
    NOT_BETWEEN = "not_between"

    # Patterns
    LIKE = "like"
    NOT_LIKE = "not_like"
    ILIKE = "ilike"
    NOT_ILIKE = "not_ilike"

    # Null checks
    IS = "is"
    IS_NOT = "is_not"

    # Logical keys (only valid at the filter key level)
    AND = "and"
    OR = "or"


_ALIASES: dict[str, str] = {
    "<>": "!=",
    "==": "=",
    "eq": "=",
    "ne": "!=",
    "gt": ">",
    "lt": "<",
    "ge": ">=",
    "le": "<=",
}


def normalize_operator(raw: str) -> str:
    """
    Normalize a user-supplied operator token.

    The leading ``-`` is optional, case is ignored and inner whitespace
    collapses to ``_``: ``"-IN"``, ``"in"`` and ``"-in"`` are the same
    operator, as are ``"not in"`` and ``"-not_in"``.
    """
    token = raw.strip().lower()
    if token.startswith("-"):
        token = token[1:]
    token = "_".join(token.split())
    return _ALIASES.get(token, token)


__all__ = ["FilterOperator", "normalize_operator"]
