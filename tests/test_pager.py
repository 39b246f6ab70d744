"""Tests for Pager arithmetic."""

from __future__ import annotations

import pytest

from sqla_resultset import Pager, PagerError


def test_middle_page():
    pager = Pager(total_entries=25, entries_per_page=10, current_page=2)

    assert pager.first_page == 1
    assert pager.last_page == 3
    assert pager.first == 11
    assert pager.last == 20
    assert pager.skipped == 10
    assert pager.entries_on_this_page == 10
    assert pager.previous_page == 1
    assert pager.next_page == 3


def test_last_page_is_partial():
    pager = Pager(total_entries=25, entries_per_page=10, current_page=3)

    assert pager.first == 21
    assert pager.last == 25
    assert pager.entries_on_this_page == 5
    assert pager.next_page is None


def test_first_page():
    pager = Pager(total_entries=25, entries_per_page=10)

    assert pager.current_page == 1
    assert pager.skipped == 0
    assert pager.previous_page is None


def test_exact_multiple():
    pager = Pager(total_entries=30, entries_per_page=10, current_page=3)

    assert pager.last_page == 3
    assert pager.entries_on_this_page == 10


def test_empty_result():
    pager = Pager(total_entries=0, entries_per_page=10, current_page=1)

    assert pager.last_page == 1
    assert pager.first == 0
    assert pager.last == 0
    assert pager.skipped == 0
    assert pager.entries_on_this_page == 0
    assert pager.next_page is None


@pytest.mark.parametrize(
    ("requested", "expected"),
    [(0, 1), (-4, 1), (4, 3), (99, 3)],
)
def test_current_page_is_clamped(requested: int, expected: int):
    pager = Pager(total_entries=25, entries_per_page=10, current_page=requested)
    assert pager.current_page == expected


def test_default_page_size():
    assert Pager(total_entries=95).last_page == 10


def test_negative_total_is_rejected():
    with pytest.raises(PagerError):
        Pager(total_entries=-1)


def test_page_size_must_be_positive():
    with pytest.raises(PagerError):
        Pager(total_entries=10, entries_per_page=0)


def test_splice():
    items = list(range(1, 26))
    pager = Pager(total_entries=25, entries_per_page=10, current_page=3)

    assert pager.splice(items) == [21, 22, 23, 24, 25]
    assert Pager(total_entries=0).splice([]) == []


def test_to_dict():
    data = Pager(total_entries=25, entries_per_page=10, current_page=2).to_dict()

    assert data["total_entries"] == 25
    assert data["last_page"] == 3
    assert data["previous_page"] == 1
    assert data["next_page"] == 3
    assert data["entries_on_this_page"] == 10


def test_pager_is_frozen():
    pager = Pager(total_entries=5)
    with pytest.raises(AttributeError):
        pager.current_page = 2  # type: ignore[misc]
