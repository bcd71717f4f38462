"""Pure predicate evaluation of filter criteria over reviews."""

import math
from collections.abc import Iterable

from .models import FilterCriteria, Review


def _parse_int(text: str) -> int | None:
    """Parse a criterion the way a leading-integer parse would.

    "4" and "4.7" both give 4; anything non-numeric gives None.
    """
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return math.trunc(number)


def _truncate(value: float | int | None) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return math.trunc(value)


def _location_matches(review: Review, wanted: str) -> bool:
    if not isinstance(review.location, str):
        return False
    return wanted.lower() in review.location.lower()


def _discount_matches(review: Review, wanted: str) -> bool:
    target = _parse_int(wanted)
    actual = _truncate(review.discount_applied)
    return target is not None and actual is not None and actual == target


def _rating_matches(review: Review, wanted: str) -> bool:
    target = _parse_int(wanted)
    return target is not None and review.rating is not None and review.rating == target


def matches(review: Review, criteria: FilterCriteria) -> bool:
    """Return True when the review satisfies every non-empty criterion.

    Never raises: a missing or malformed review field simply fails the
    criterion that looks at it, and an unparseable numeric criterion
    matches nothing.
    """
    if criteria.location and not _location_matches(review, criteria.location):
        return False
    if criteria.order_type and review.order_type != criteria.order_type:
        return False
    if criteria.discount_applied and not _discount_matches(
        review, criteria.discount_applied
    ):
        return False
    if criteria.rating and not _rating_matches(review, criteria.rating):
        return False
    if criteria.performance and review.performance != criteria.performance:
        return False
    if criteria.accuracy and review.accuracy != criteria.accuracy:
        return False
    if criteria.sentiment and review.sentiment != criteria.sentiment:
        return False
    return True


def filter_reviews(
    reviews: Iterable[Review], criteria: FilterCriteria
) -> list[Review]:
    """Return the reviews matching ``criteria``, in their original order."""
    if criteria.is_empty:
        return list(reviews)
    return [review for review in reviews if matches(review, criteria)]
