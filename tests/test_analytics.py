"""Metrics computed over a filtered review set."""

from review_dashboard.analytics import AnalyticsAggregator, aggregate
from review_dashboard.constants import NOT_APPLICABLE, PriceBucket


def test_single_agent_average_and_ranking(make_review):
    reviews = [make_review(agent_name="X", rating=rating) for rating in (4, 2, 5)]

    snapshot = aggregate(reviews)

    assert snapshot.average_rating == 3.67
    assert snapshot.top_agent == "X"
    assert snapshot.bottom_agent == "X"
    assert snapshot.total_reviews == 3


def test_complaint_histogram_orders_by_count(make_review):
    reviews = [
        make_review(complaints=["Late Delivery"]),
        make_review(complaints=["Late Delivery", "Rude Behavior"]),
        make_review(complaints=[]),
    ]

    snapshot = aggregate(reviews)

    assert snapshot.most_common_complaint == "Late Delivery"
    assert snapshot.complaint_histogram == [("Late Delivery", 2), ("Rude Behavior", 1)]


def test_empty_set_is_not_applicable():
    snapshot = aggregate([])

    assert snapshot.average_rating is None
    assert snapshot.top_agent is None
    assert snapshot.bottom_agent is None
    assert snapshot.most_common_complaint is None
    assert snapshot.complaint_histogram == []
    assert snapshot.price_histogram == {bucket.value: 0 for bucket in PriceBucket}

    rendered = snapshot.to_dict()
    assert rendered["average_rating"] == NOT_APPLICABLE
    assert rendered["top_agent"] == NOT_APPLICABLE
    assert rendered["most_common_complaint"] == NOT_APPLICABLE


def test_sample_set(sample_reviews):
    snapshot = aggregate(sample_reviews)

    assert snapshot.average_rating == 3.25
    assert snapshot.top_agent == "Cara"
    assert snapshot.bottom_agent == "Bob"
    assert [a.agent_name for a in snapshot.agent_rankings] == ["Cara", "Alice", "Bob"]
    assert snapshot.complaint_histogram == [
        ("Late Delivery", 4),
        ("Rude Behavior", 2),
        ("Damaged Goods", 1),
        ("Wrong Item", 1),
    ]
    assert snapshot.price_histogram == {"0-50": 4, "51-100": 5, "101+": 3}


def test_agent_ties_keep_first_seen_order(make_review):
    reviews = [
        make_review(agent_name="A", rating=5),
        make_review(agent_name="B", rating=5),
        make_review(agent_name="C", rating=3),
    ]
    snapshot = aggregate(reviews)
    assert snapshot.top_agent == "A"
    assert snapshot.bottom_agent == "C"

    tied = aggregate([make_review(agent_name="A", rating=4), make_review(agent_name="B", rating=4)])
    assert tied.top_agent == "A"
    assert tied.bottom_agent == "B"


def test_complaint_ties_keep_first_seen_order(make_review):
    reviews = [make_review(complaints=["B", "A"]), make_review(complaints=["A", "B"])]
    assert aggregate(reviews).complaint_histogram == [("B", 2), ("A", 2)]


def test_histogram_keeps_top_five(make_review):
    tags = ["t1", "t2", "t3", "t4", "t5", "t6", "t7"]
    reviews = [make_review(complaints=tags[: index + 1]) for index in range(len(tags))]

    snapshot = aggregate(reviews)

    assert [tag for tag, _ in snapshot.complaint_histogram] == ["t1", "t2", "t3", "t4", "t5"]
    assert snapshot.complaint_histogram[0] == ("t1", 7)

    wider = AnalyticsAggregator(top_complaints=7).aggregate(reviews)
    assert len(wider.complaint_histogram) == 7


def test_price_bucket_boundaries_and_bad_prices(make_review):
    prices = [0, 50, 50.5, 100, 101, None, "abc", True, float("inf")]
    snapshot = aggregate([make_review(order_price=price, rating=3) for price in prices])

    assert snapshot.price_histogram == {"0-50": 2, "51-100": 2, "101+": 1}
    # Reviews without a usable price still count towards the averages
    assert snapshot.total_reviews == len(prices)
    assert snapshot.average_rating == 3.0


def test_missing_agent_and_rating(make_review):
    snapshot = aggregate([make_review(rating=4), make_review(agent_name="Z")])

    assert snapshot.top_agent == "Unknown"
    assert snapshot.bottom_agent == "Z"
    assert snapshot.average_rating == 2.0


def test_no_complaints_in_non_empty_set(make_review):
    snapshot = aggregate([make_review(rating=5)])

    assert snapshot.most_common_complaint is None
    assert snapshot.complaint_histogram == []
    assert snapshot.average_rating == 5.0
