"""Summary statistics over a filtered review set."""

import math
from collections import Counter
from collections.abc import Sequence

from loguru import logger

from .constants import (
    PRICE_LOW_MAX,
    PRICE_MID_MAX,
    RATING_DECIMALS,
    TOP_COMPLAINTS_LIMIT,
    UNKNOWN_AGENT,
    PriceBucket,
)
from .models import AgentRating, AnalyticsSnapshot, Review


def _price_bucket(price: object) -> PriceBucket | None:
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return None
    if not math.isfinite(price):
        return None
    if price <= PRICE_LOW_MAX:
        return PriceBucket.LOW
    if price <= PRICE_MID_MAX:
        return PriceBucket.MID
    return PriceBucket.HIGH


class AnalyticsAggregator:
    """Computes dashboard metrics over a set of reviews.

    Produces the same snapshot whether the set comes from the current page
    or the full collection: average rating, agent ranking, complaint
    histogram and order price histogram.

    Attributes:
        top_complaints: Number of complaint tags kept in the histogram.
    """

    def __init__(self, *, top_complaints: int = TOP_COMPLAINTS_LIMIT):
        """Initialize the AnalyticsAggregator.

        Args:
            top_complaints: Number of complaint tags kept in the histogram.
        """
        self.top_complaints = top_complaints

    def aggregate(self, reviews: Sequence[Review]) -> AnalyticsSnapshot:
        """Aggregate ``reviews`` into an AnalyticsSnapshot.

        An empty input yields the not-applicable snapshot; this method
        never raises on malformed review data.

        Args:
            reviews: The filtered review set.

        Returns:
            AnalyticsSnapshot: Statistics over the set.
        """
        if not reviews:
            return AnalyticsSnapshot.empty()

        total_rating = sum(review.rating or 0 for review in reviews)
        average_rating = round(total_rating / len(reviews), RATING_DECIMALS)

        rankings = self.rank_agents(reviews)
        complaints = self.complaint_counts(reviews)

        snapshot = AnalyticsSnapshot(
            average_rating=average_rating,
            top_agent=rankings[0].agent_name,
            bottom_agent=rankings[-1].agent_name,
            most_common_complaint=complaints[0][0] if complaints else None,
            complaint_histogram=complaints[: self.top_complaints],
            price_histogram=self.price_histogram(reviews),
            agent_rankings=rankings,
            total_reviews=len(reviews),
        )
        logger.debug(
            f"Aggregated {len(reviews)} reviews: average {average_rating}, "
            f"{len(rankings)} agents, {len(complaints)} complaint tags"
        )
        return snapshot

    def rank_agents(self, reviews: Sequence[Review]) -> list[AgentRating]:
        """Group by agent and sort by mean rating, best first.

        Agents with equal means keep the order in which they were first seen.
        """
        totals: dict[str, list[int]] = {}
        for review in reviews:
            agent = review.agent_name or UNKNOWN_AGENT
            bucket = totals.setdefault(agent, [0, 0])
            bucket[0] += review.rating or 0
            bucket[1] += 1

        rankings = [
            AgentRating(
                agent_name=agent,
                average_rating=round(total / count, RATING_DECIMALS),
                review_count=count,
            )
            for agent, (total, count) in totals.items()
        ]
        return sorted(rankings, key=lambda a: a.average_rating, reverse=True)

    def complaint_counts(self, reviews: Sequence[Review]) -> list[tuple[str, int]]:
        """Count complaint tags, most frequent first, ties in first-seen order."""
        counts: Counter[str] = Counter()
        for review in reviews:
            for complaint in review.complaints or []:
                if complaint:
                    counts[complaint] += 1
        return sorted(counts.items(), key=lambda item: item[1], reverse=True)

    def price_histogram(self, reviews: Sequence[Review]) -> dict[str, int]:
        """Count reviews per price bucket; non-numeric prices are skipped."""
        histogram = {bucket.value: 0 for bucket in PriceBucket}
        for review in reviews:
            bucket = _price_bucket(review.order_price)
            if bucket is not None:
                histogram[bucket.value] += 1
        return histogram


def aggregate(reviews: Sequence[Review]) -> AnalyticsSnapshot:
    """Aggregate with the default settings."""
    return AnalyticsAggregator().aggregate(reviews)
