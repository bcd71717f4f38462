"""Pagination never leaves the current page out of range."""

import pytest

from review_dashboard.errors import ValidationError
from review_dashboard.pagination import change_page, page_slice, paginate


def test_requested_page_is_clamped_to_last_page():
    state = paginate(12, 5, 10)
    assert state.total_pages == 2
    assert state.current_page == 2
    assert state.total_items == 12


def test_empty_result_still_has_one_page():
    state = paginate(0, 3, 10)
    assert state.total_pages == 1
    assert state.current_page == 1
    assert not state.has_next
    assert not state.has_previous


def test_requested_page_below_one_is_floored():
    assert paginate(25, 0, 10).current_page == 1
    assert paginate(25, -4, 10).current_page == 1


def test_current_page_always_within_bounds():
    for count in range(0, 31):
        for page in range(-2, 9):
            for size in range(1, 8):
                state = paginate(count, page, size)
                assert 1 <= state.current_page <= state.total_pages
                assert state.total_pages == max(1, -(-count // size))


def test_page_size_must_be_positive():
    with pytest.raises(ValidationError):
        paginate(10, 1, 0)


def test_change_page_ignores_out_of_range():
    state = paginate(30, 2, 10)

    assert change_page(state, 0) is state
    assert change_page(state, 4) is state

    moved = change_page(state, 3)
    assert moved.current_page == 3
    assert moved.total_pages == 3
    assert not moved.has_next


def test_page_slice_returns_current_page_items():
    items = list(range(12))

    assert page_slice(items, paginate(12, 1, 10)) == list(range(10))
    assert page_slice(items, paginate(12, 2, 10)) == [10, 11]
