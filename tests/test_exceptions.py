"""Tests for the exception hierarchy."""

from __future__ import annotations

from sqla_resultset import (
    PagerError,
    ResultSetError,
    UnknownOperatorError,
    UnsupportedBackendError,
    UsageError,
)


def test_hierarchy():
    assert issubclass(UsageError, ResultSetError)
    assert issubclass(PagerError, UsageError)
    assert issubclass(UnknownOperatorError, UsageError)
    assert issubclass(UnsupportedBackendError, ResultSetError)
    assert not issubclass(UnsupportedBackendError, UsageError)


def test_base_to_dict():
    err = ResultSetError("something broke")
    assert err.to_dict() == {"error": "ResultSetError", "message": "something broke"}


def test_usage_error_to_dict():
    assert UsageError("bad call").to_dict() == {
        "error": "USAGE_ERROR",
        "message": "bad call",
    }


def test_pager_error_to_dict():
    assert PagerError("no page").to_dict()["error"] == "PAGER_ERROR"


def test_unknown_operator_error():
    err = UnknownOperatorError("-lik", ["like", "ilike", "in"])

    assert "like" in err.suggestions
    assert "'-lik'" in str(err)
    data = err.to_dict()
    assert data["error"] == "OPERATOR_NOT_FOUND"
    assert data["operator"] == "-lik"
    assert data["valid_operators"] == ["ilike", "in", "like"]


def test_unknown_operator_without_suggestions():
    err = UnknownOperatorError("zzz", ["like", "in"])

    assert err.suggestions == []
    assert "Did you mean" not in str(err)


def test_unsupported_backend_error():
    err = UnsupportedBackendError("Auto-increment key retrieval", "postgresql")

    assert str(err) == (
        "Auto-increment key retrieval is not supported for the 'postgresql' backend"
    )
    assert err.to_dict() == {
        "error": "UNSUPPORTED_BACKEND",
        "feature": "Auto-increment key retrieval",
        "backend": "postgresql",
    }
