"""Page count and current page derivation for a filtered result set."""

import math
from collections.abc import Sequence
from typing import TypeVar

from .constants import FIRST_PAGE
from .errors import ValidationError
from .models import PaginationState

T = TypeVar("T")


def paginate(filtered_count: int, requested_page: int, page_size: int) -> PaginationState:
    """Derive a pagination state that always satisfies 1 <= current <= total.

    Args:
        filtered_count: Number of items in the result set.
        requested_page: Page the caller would like to show.
        page_size: Items per page.

    Returns:
        PaginationState: State with the requested page clamped into range.

    Raises:
        ValidationError: If ``page_size`` is not positive.
    """
    if page_size <= 0:
        raise ValidationError(f"Page size must be positive, got {page_size}")

    total_items = max(0, filtered_count)
    total_pages = max(FIRST_PAGE, math.ceil(total_items / page_size))
    current_page = max(FIRST_PAGE, min(requested_page, total_pages))
    return PaginationState(
        current_page=current_page,
        total_pages=total_pages,
        total_items=total_items,
        page_size=page_size,
    )


def change_page(state: PaginationState, new_page: int) -> PaginationState:
    """Move to ``new_page``, or return ``state`` unchanged if it is out of range."""
    if new_page < FIRST_PAGE or new_page > state.total_pages:
        return state
    return PaginationState(
        current_page=new_page,
        total_pages=state.total_pages,
        total_items=state.total_items,
        page_size=state.page_size,
    )


def page_slice(items: Sequence[T], state: PaginationState) -> list[T]:
    """Return the items shown on the current page."""
    return list(items[state.offset : state.offset + state.page_size])
