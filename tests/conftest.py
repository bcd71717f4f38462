"""Shared fixtures: sample reviews and an in-memory data source."""

import asyncio
import sys
from collections import Counter
from pathlib import Path
from typing import Any

import pytest

# Ensure repository root is on sys.path for module resolution
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from review_dashboard.errors import TransportFailure, Unauthorized
from review_dashboard.models import Review, ReviewPage, TagUpdate


SAMPLE_ROWS = [
    # id, agent, location, rating, order type, price, discount, performance, accuracy, sentiment, complaints
    ("r1", "Alice", "New York", 5, "Express", 45.0, 5.0, "Fast", "Order Accurate", "Positive", ["Late Delivery"]),
    ("r2", "Bob", "Los Angeles", 2, "Standard", 75.5, 0, "Slow", "Order Mistake", "Negative", ["Late Delivery", "Rude Behavior"]),
    ("r3", "Cara", "Chicago", 4, "Same-Day", 120, None, "Average", "Order Accurate", "Positive", []),
    ("r4", "Alice", "New York", 3, "Standard", 30, 5.9, "Average", "Order Accurate", "Neutral", ["Damaged Goods"]),
    ("r5", "Bob", "Houston", 1, "Express", 101, 10, "Slow", "Order Mistake", "Negative", ["Late Delivery"]),
    ("r6", "Cara", "Chicago", 5, "Standard", 50, None, "Fast", "Order Accurate", "Positive", []),
    ("r7", "Bob", "Los Angeles", 4, "Same-Day", 100, 2.5, "Fast", "Order Accurate", "Positive", []),
    ("r8", "Cara", "Houston", 2, "Express", 60, None, "Slow", "Order Mistake", "Negative", ["Wrong Item"]),
    ("r9", "Alice", "Chicago", 4, "Standard", 15, None, "Average", "Order Accurate", "Neutral", []),
    ("r10", "Bob", "New York", 3, "Express", 99, None, "Average", "Order Mistake", "Neutral", ["Late Delivery"]),
    ("r11", "Cara", "Los Angeles", 5, "Standard", 140, None, "Fast", "Order Accurate", "Positive", []),
    ("r12", "Alice", "Houston", 1, "Same-Day", 80, None, "Slow", "Order Mistake", "Negative", ["Rude Behavior"]),
]


def build_reviews() -> list[Review]:
    return [
        Review(
            id=row[0],
            agent_name=row[1],
            location=row[2],
            rating=row[3],
            order_type=row[4],
            order_price=row[5],
            discount_applied=row[6],
            performance=row[7],
            accuracy=row[8],
            sentiment=row[9],
            complaints=list(row[10]),
        )
        for row in SAMPLE_ROWS
    ]


class FakeDataSource:
    """In-memory stand-in for the review API.

    ``fail_with`` maps an operation name to the exception it should raise,
    ``page_delays`` delays specific pages and ``fetch_all_gate`` holds the
    full-collection fetch until the event is set.
    """

    def __init__(self, reviews: list[Review], *, summary: dict[str, Any] | None = None):
        self.reviews = list(reviews)
        self.summary = summary if summary is not None else {"averageRating": 3.25}
        self.calls: Counter[str] = Counter()
        self.requested_pages: list[int] = []
        self.fail_with: dict[str, Exception] = {}
        self.page_delays: dict[int, float] = {}
        self.fetch_all_gate: asyncio.Event | None = None

    def _check(self, operation: str, credential: str | None) -> None:
        self.calls[operation] += 1
        if not credential:
            raise Unauthorized("no credential")
        error = self.fail_with.get(operation)
        if error is not None:
            raise error

    async def fetch_page(self, page: int, page_size: int, credential: str | None) -> ReviewPage:
        self.requested_pages.append(page)
        self._check("fetch_page", credential)
        if page in self.page_delays:
            await asyncio.sleep(self.page_delays[page])
        start = (page - 1) * page_size
        return ReviewPage(
            records=self.reviews[start : start + page_size],
            total_count=len(self.reviews),
            page=page,
            page_size=page_size,
        )

    async def fetch_all(self, credential: str | None, *, total_hint: int | None = None) -> list[Review]:
        self._check("fetch_all", credential)
        if self.fetch_all_gate is not None:
            await self.fetch_all_gate.wait()
        await asyncio.sleep(0)
        return list(self.reviews)

    async def fetch_analytics_summary(self, credential: str | None) -> dict[str, Any]:
        self._check("fetch_analytics_summary", credential)
        return dict(self.summary)

    async def persist_tag_update(
        self, review_id: str, update: TagUpdate, credential: str | None
    ) -> Review:
        self._check("persist_tag_update", credential)
        for index, review in enumerate(self.reviews):
            if review.id == review_id:
                updated = review.with_tags(update)
                self.reviews[index] = updated
                return updated
        raise TransportFailure(f"review {review_id} not found")


class RecordingNotifier:
    """Notifier that keeps every message for assertions."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", str(message)))

    def info(self, message: str) -> None:
        self.messages.append(("info", str(message)))

    def error(self, message: str) -> None:
        self.messages.append(("error", str(message)))

    def levels(self) -> list[str]:
        return [level for level, _ in self.messages]


@pytest.fixture
def sample_reviews() -> list[Review]:
    """Twelve reviews across three agents and four cities."""

    return build_reviews()


@pytest.fixture
def fake_source(sample_reviews: list[Review]) -> FakeDataSource:
    return FakeDataSource(sample_reviews)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_review():
    """Factory for reviews with only the fields a test cares about."""

    counter = iter(range(1, 10_000))

    def _make(**fields: Any) -> Review:
        fields.setdefault("id", f"t{next(counter)}")
        return Review(**fields)

    return _make
