"""Filtering engine keeps the matching reviews in their original order."""

from review_dashboard.filters import filter_reviews, matches
from review_dashboard.models import FilterCriteria


def _ids(reviews):
    return [review.id for review in reviews]


def test_empty_criteria_returns_everything_in_order(sample_reviews):
    result = filter_reviews(sample_reviews, FilterCriteria.empty())

    assert result == sample_reviews
    assert result is not sample_reviews


def test_location_is_case_insensitive_substring(sample_reviews):
    result = filter_reviews(sample_reviews, FilterCriteria(location="YORK"))
    assert _ids(result) == ["r1", "r4", "r10"]


def test_exact_match_fields(sample_reviews):
    assert _ids(filter_reviews(sample_reviews, FilterCriteria(order_type="Express"))) == [
        "r1",
        "r5",
        "r8",
        "r10",
    ]
    assert _ids(filter_reviews(sample_reviews, FilterCriteria(rating="5"))) == ["r1", "r6", "r11"]
    assert _ids(filter_reviews(sample_reviews, FilterCriteria(accuracy="Order Mistake"))) == [
        "r2",
        "r5",
        "r8",
        "r10",
        "r12",
    ]


def test_discount_compares_integer_part(sample_reviews):
    # 5.0 and 5.9 both truncate to 5
    assert _ids(filter_reviews(sample_reviews, FilterCriteria(discount_applied="5"))) == ["r1", "r4"]
    assert _ids(filter_reviews(sample_reviews, FilterCriteria(discount_applied="0"))) == ["r2"]
    assert _ids(filter_reviews(sample_reviews, FilterCriteria(discount_applied="2"))) == ["r7"]


def test_discount_truncates_toward_zero(make_review):
    review = make_review(discount_applied=-2.7)
    assert matches(review, FilterCriteria(discount_applied="-2"))
    assert not matches(review, FilterCriteria(discount_applied="-3"))


def test_all_criteria_must_hold(sample_reviews):
    criteria = FilterCriteria(location="chicago", performance="Fast", sentiment="Positive")
    assert _ids(filter_reviews(sample_reviews, criteria)) == ["r6"]


def test_missing_fields_only_fail_when_filtered(make_review):
    bare = make_review()

    assert matches(bare, FilterCriteria.empty())
    assert not matches(bare, FilterCriteria(location="New York"))
    assert not matches(bare, FilterCriteria(rating="3"))
    assert not matches(bare, FilterCriteria(discount_applied="0"))
    assert not matches(bare, FilterCriteria(sentiment="Positive"))


def test_malformed_criteria_match_nothing(sample_reviews):
    assert filter_reviews(sample_reviews, FilterCriteria(rating="abc")) == []
    assert filter_reviews(sample_reviews, FilterCriteria(discount_applied="lots")) == []


def test_non_numeric_discount_on_review_does_not_raise(make_review):
    review = make_review(discount_applied=float("nan"))
    assert not matches(review, FilterCriteria(discount_applied="0"))


def test_filtered_set_never_grows(sample_reviews):
    criteria_list = [
        FilterCriteria(location="o"),
        FilterCriteria(rating="4"),
        FilterCriteria(order_type="Same-Day", sentiment="Negative"),
        FilterCriteria(location="nowhere"),
    ]
    for criteria in criteria_list:
        result = filter_reviews(sample_reviews, criteria)
        assert len(result) <= len(sample_reviews)
        assert all(matches(review, criteria) for review in result)
