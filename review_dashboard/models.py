"""Data models for the review dashboard."""

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any

from .constants import (
    EMPTY_STRING,
    NOT_APPLICABLE,
    Accuracy,
    ApiResponseKey,
    FilterField,
    Performance,
    PriceBucket,
    Sentiment,
    SnapshotKey,
    TagField,
)
from .errors import ValidationError


def _to_number(value: Any) -> float | int | None:
    """Coerce a wire value to a number, or None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _to_rating(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


@dataclass
class Review:
    """Represents a single delivery review.

    Identity and content are fixed once fetched; only the tag fields
    (performance, accuracy, sentiment) are ever patched by the dashboard.

    Attributes:
        id: Unique identifier of the review.
        agent_name: Name of the delivery agent being reviewed.
        location: City or area of the delivery.
        rating: Star rating from 1 to 5.
        order_type: Standard, Express or Same-Day.
        order_price: Order price, None when the payload held no number.
        discount_applied: Discount on the order, if any.
        performance: Performance tag (Fast, Average, Slow).
        accuracy: Accuracy tag (Order Accurate, Order Mistake).
        sentiment: Sentiment tag (Positive, Neutral, Negative).
        complaints: Complaint tags in the order they were recorded.
    """

    id: str
    agent_name: str | None = None
    location: str | None = None
    rating: int | None = None
    order_type: str | None = None
    order_price: float | int | None = None
    discount_applied: float | int | None = None
    performance: str | None = None
    accuracy: str | None = None
    sentiment: str | None = None
    complaints: list[str] = field(default_factory=list)
    customer_name: str | None = None
    comment: str | None = None
    order_id: str | None = None
    created_at: str | None = None

    @classmethod
    def from_dict(cls, *, data: dict[str, Any]) -> "Review":
        """Create a Review from an API response or cached dictionary.

        Handles the API format (``_id`` and camelCase keys) as well as the
        cached/export format (``id`` and snake_case keys).

        Args:
            data: Dictionary containing review data.

        Returns:
            Review: A new Review populated from the dictionary.
        """

        def pick(snake: str, camel: str) -> Any:
            value = data.get(snake)
            return value if value is not None else data.get(camel)

        review_id = (
            data.get("id")
            or data.get(ApiResponseKey.ID)
            or data.get(ApiResponseKey.REVIEW_ID, EMPTY_STRING)
        )

        complaints = data.get(ApiResponseKey.COMPLAINTS) or []
        if isinstance(complaints, str):
            complaints = [complaints]

        return cls(
            id=str(review_id),
            agent_name=pick("agent_name", ApiResponseKey.AGENT_NAME),
            location=data.get(ApiResponseKey.LOCATION),
            rating=_to_rating(data.get(ApiResponseKey.RATING)),
            order_type=pick("order_type", ApiResponseKey.ORDER_TYPE),
            order_price=_to_number(pick("order_price", ApiResponseKey.ORDER_PRICE)),
            discount_applied=_to_number(
                pick("discount_applied", ApiResponseKey.DISCOUNT_APPLIED)
            ),
            performance=data.get(ApiResponseKey.PERFORMANCE),
            accuracy=data.get(ApiResponseKey.ACCURACY),
            sentiment=data.get(ApiResponseKey.SENTIMENT),
            complaints=[str(c) for c in complaints if c is not None],
            customer_name=pick("customer_name", ApiResponseKey.CUSTOMER_NAME),
            comment=data.get(ApiResponseKey.COMMENT),
            order_id=pick("order_id", ApiResponseKey.ORDER_ID),
            created_at=pick("created_at", ApiResponseKey.CREATED_AT),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the review to a dictionary for serialization."""
        return asdict(self)

    def with_tags(self, update: "TagUpdate") -> "Review":
        """Return a copy of this review with the given tag fields patched."""
        return replace(self, **update.to_payload())


@dataclass(frozen=True)
class FilterCriteria:
    """A set of filter values; an empty string means no constraint.

    Instances are immutable so that swapping the applied criteria is a
    single reference assignment.
    """

    location: str = EMPTY_STRING
    order_type: str = EMPTY_STRING
    discount_applied: str = EMPTY_STRING
    rating: str = EMPTY_STRING
    performance: str = EMPTY_STRING
    accuracy: str = EMPTY_STRING
    sentiment: str = EMPTY_STRING

    @classmethod
    def empty(cls) -> "FilterCriteria":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))

    def replace_field(self, name: str, value: str) -> "FilterCriteria":
        """Return a copy with one field replaced.

        Raises:
            ValidationError: If ``name`` is not a filterable field.
        """
        try:
            filter_field = FilterField(name)
        except ValueError as e:
            raise ValidationError(f"Unknown filter field: {name!r}") from e
        return replace(self, **{filter_field.value: value})

    def active(self) -> dict[str, str]:
        """Return only the fields that carry a constraint."""
        return {key: value for key, value in self.to_dict().items() if value}

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class PaginationState:
    """Pagination over a (filtered) result set.

    Attributes:
        current_page: 1-based page being displayed.
        total_pages: Number of pages, never less than 1.
        total_items: Number of items across all pages.
        page_size: Items per page.
    """

    current_page: int
    total_pages: int
    total_items: int
    page_size: int

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.page_size


@dataclass(frozen=True)
class AgentRating:
    """Mean rating of one agent over a review set."""

    agent_name: str
    average_rating: float
    review_count: int


def _empty_price_histogram() -> dict[str, int]:
    return {bucket.value: 0 for bucket in PriceBucket}


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """Summary statistics over a filtered review set.

    ``None`` marks a statistic as not applicable, which is the case for
    every scalar when the input set is empty.

    Attributes:
        average_rating: Mean rating rounded to 2 decimals.
        top_agent: Agent with the highest mean rating.
        bottom_agent: Agent with the lowest mean rating.
        most_common_complaint: Most frequent complaint tag.
        complaint_histogram: Top complaint tags with their counts, descending.
        price_histogram: Review counts per order price bucket.
        agent_rankings: Every agent with its mean rating, best first.
        total_reviews: Size of the input set.
    """

    average_rating: float | None
    top_agent: str | None
    bottom_agent: str | None
    most_common_complaint: str | None
    complaint_histogram: list[tuple[str, int]] = field(default_factory=list)
    price_histogram: dict[str, int] = field(default_factory=_empty_price_histogram)
    agent_rankings: list[AgentRating] = field(default_factory=list)
    total_reviews: int = 0

    @classmethod
    def empty(cls) -> "AnalyticsSnapshot":
        return cls(
            average_rating=None,
            top_agent=None,
            bottom_agent=None,
            most_common_complaint=None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the snapshot to a dictionary, rendering missing values as N/A."""

        def show(value: Any) -> Any:
            return NOT_APPLICABLE if value is None else value

        return {
            SnapshotKey.AVERAGE_RATING: show(self.average_rating),
            SnapshotKey.TOP_AGENT: show(self.top_agent),
            SnapshotKey.BOTTOM_AGENT: show(self.bottom_agent),
            SnapshotKey.MOST_COMMON_COMPLAINT: show(self.most_common_complaint),
            SnapshotKey.COMPLAINT_HISTOGRAM: [
                {"complaint": tag, "count": count}
                for tag, count in self.complaint_histogram
            ],
            SnapshotKey.PRICE_HISTOGRAM: dict(self.price_histogram),
            SnapshotKey.AGENT_RANKINGS: [asdict(a) for a in self.agent_rankings],
            SnapshotKey.TOTAL_REVIEWS: self.total_reviews,
        }


_TAG_ENUMS = {
    TagField.PERFORMANCE: Performance,
    TagField.ACCURACY: Accuracy,
    TagField.SENTIMENT: Sentiment,
}


@dataclass(frozen=True)
class TagUpdate:
    """A partial update of the editable tag fields of a review."""

    performance: Performance | None = None
    accuracy: Accuracy | None = None
    sentiment: Sentiment | None = None

    def __post_init__(self) -> None:
        # Frozen, so coerce through object.__setattr__
        for tag_field, enum_cls in _TAG_ENUMS.items():
            value = getattr(self, tag_field.value)
            if value is None or isinstance(value, enum_cls):
                continue
            try:
                object.__setattr__(self, tag_field.value, enum_cls(value))
            except ValueError as e:
                raise ValidationError(
                    f"Invalid {tag_field.value} tag: {value!r}"
                ) from e

    @property
    def is_empty(self) -> bool:
        return not self.to_payload()

    def to_payload(self) -> dict[str, str]:
        """Return only the tag fields being set, as plain strings."""
        return {
            tag_field.value: str(getattr(self, tag_field.value))
            for tag_field in TagField
            if getattr(self, tag_field.value) is not None
        }


@dataclass
class ReviewPage:
    """One page of reviews as returned by the data source."""

    records: list[Review]
    total_count: int
    page: int
    page_size: int
