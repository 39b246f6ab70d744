"""
Result shaping.

Every retrieval method of a result set names one ``RowShape``; the
connector executes the statement and hands the live ``Result`` to the
matching shaper before the connection is released.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from .exceptions import UsageError

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Result


class RowShape(str, Enum):
    """How the rows of an executed statement are returned."""

    NONE = "none"
    ARRAY_ROW = "array_row"
    HASH_ROW = "hash_row"
    ARRAY_OF_ARRAYS = "array_of_array_rows"
    ARRAY_OF_HASHES = "array_of_hash_rows"
    HASH_OF_HASHES = "hash_of_hash_rows"
    COLUMN = "column"
    SCALAR = "scalar"


def _discard(result: Result[Any], _key: str | None) -> None:
    return None


def _array_row(result: Result[Any], _key: str | None) -> tuple[Any, ...]:
    row = result.first()
    return tuple(row) if row is not None else ()


def _hash_row(result: Result[Any], _key: str | None) -> dict[str, Any] | None:
    row = result.mappings().first()
    return dict(row) if row is not None else None


def _array_of_arrays(result: Result[Any], _key: str | None) -> list[tuple[Any, ...]]:
    return [tuple(row) for row in result]


def _array_of_hashes(result: Result[Any], _key: str | None) -> list[dict[str, Any]]:
    return [dict(row) for row in result.mappings()]


def _hash_of_hashes(result: Result[Any], key: str | None) -> dict[Any, dict[str, Any]]:
    if key is None or key not in result.keys():
        raise UsageError(
            f"Key column '{key}' is not among the selected columns: "
            f"{', '.join(result.keys())}"
        )
    indexed: dict[Any, dict[str, Any]] = {}
    for row in result.mappings():
        # later rows overwrite earlier ones with the same key
        indexed[row[key]] = dict(row)
    return indexed


def _column(result: Result[Any], _key: str | None) -> list[Any]:
    return list(result.scalars())


def _scalar(result: Result[Any], _key: str | None) -> Any:
    return result.scalar()


_SHAPERS: dict[RowShape, Callable[[Result[Any], str | None], Any]] = {
    RowShape.NONE: _discard,
    RowShape.ARRAY_ROW: _array_row,
    RowShape.HASH_ROW: _hash_row,
    RowShape.ARRAY_OF_ARRAYS: _array_of_arrays,
    RowShape.ARRAY_OF_HASHES: _array_of_hashes,
    RowShape.HASH_OF_HASHES: _hash_of_hashes,
    RowShape.COLUMN: _column,
    RowShape.SCALAR: _scalar,
}


def shape_result(
    result: Result[Any], shape: RowShape, *, key: str | None = None
) -> Any:
    """Shape ``result`` according to ``shape``."""
    return _SHAPERS[shape](result, key)
