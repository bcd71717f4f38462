"""Constants and enumerations for the review dashboard."""

from enum import StrEnum
from typing import Final


# API Configuration
REVIEW_API_BASE_URL: Final[str] = "http://localhost:5000/api/"
API_REVIEW_ENDPOINT: Final[str] = "review"
API_ANALYTICS_ENDPOINT: Final[str] = "review/analytics"
API_TAGS_ENDPOINT: Final[str] = "review/{review_id}/tags"
AUTHORIZATION_HEADER: Final[str] = "Authorization"
BEARER_PREFIX: Final[str] = "Bearer"

# Default Values
DEFAULT_PAGE_SIZE: Final[int] = 10
DEFAULT_DEBOUNCE_SECONDS: Final[float] = 0.5
DEFAULT_HTTP_TIMEOUT: Final[float] = 30.0
DEFAULT_MAX_RETRIES: Final[int] = 3
DEFAULT_MAX_CONCURRENCY: Final[int] = 10
DEFAULT_RATE_LIMIT: Final[int] = 10
TOP_COMPLAINTS_LIMIT: Final[int] = 5
RATING_DECIMALS: Final[int] = 2
ELEVATED_ROLE: Final[str] = "Admin"
UNKNOWN_AGENT: Final[str] = "Unknown"
NOT_APPLICABLE: Final[str] = "N/A"

# JSON Serialization
JSON_INDENT: Final[int] = 2
CSV_LIST_SEPARATOR: Final[str] = "; "

# Empty Values
EMPTY_STRING: Final[str] = ""

# Numeric Constants
EXIT_CODE_ERROR: Final[int] = 1
FIRST_PAGE: Final[int] = 1
HTTP_UNAUTHORIZED: Final[int] = 401

# Price buckets are inclusive upper bounds
PRICE_LOW_MAX: Final[int] = 50
PRICE_MID_MAX: Final[int] = 100


class OrderType(StrEnum):
    """Delivery order types."""

    STANDARD = "Standard"
    EXPRESS = "Express"
    SAME_DAY = "Same-Day"


class Performance(StrEnum):
    """Agent performance tag."""

    FAST = "Fast"
    AVERAGE = "Average"
    SLOW = "Slow"


class Accuracy(StrEnum):
    """Order accuracy tag."""

    ORDER_ACCURATE = "Order Accurate"
    ORDER_MISTAKE = "Order Mistake"


class Sentiment(StrEnum):
    """Review sentiment tag."""

    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"


class FilterField(StrEnum):
    """Filterable review fields."""

    LOCATION = "location"
    ORDER_TYPE = "order_type"
    DISCOUNT_APPLIED = "discount_applied"
    RATING = "rating"
    PERFORMANCE = "performance"
    ACCURACY = "accuracy"
    SENTIMENT = "sentiment"


class TagField(StrEnum):
    """Editable review tag fields."""

    PERFORMANCE = "performance"
    ACCURACY = "accuracy"
    SENTIMENT = "sentiment"


class PriceBucket(StrEnum):
    """Order price histogram buckets."""

    LOW = "0-50"
    MID = "51-100"
    HIGH = "101+"


class LoadState(StrEnum):
    """Load state of the full review collection."""

    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"


class ApiResponseKey(StrEnum):
    """API response dictionary keys."""

    REVIEW = "review"
    ID = "_id"
    REVIEW_ID = "reviewId"
    AGENT_NAME = "agentName"
    LOCATION = "location"
    RATING = "rating"
    ORDER_TYPE = "orderType"
    ORDER_PRICE = "orderPrice"
    DISCOUNT_APPLIED = "discountApplied"
    PERFORMANCE = "performance"
    ACCURACY = "accuracy"
    SENTIMENT = "sentiment"
    COMPLAINTS = "complaints"
    CUSTOMER_NAME = "customerName"
    COMMENT = "comment"
    ORDER_ID = "orderId"
    CREATED_AT = "createdAt"


class ApiRequestKey(StrEnum):
    """API request query parameter keys."""

    PAGE = "page"
    LIMIT = "limit"


class SnapshotKey(StrEnum):
    """Analytics snapshot output keys."""

    AVERAGE_RATING = "average_rating"
    TOP_AGENT = "top_agent"
    BOTTOM_AGENT = "bottom_agent"
    MOST_COMMON_COMPLAINT = "most_common_complaint"
    COMPLAINT_HISTOGRAM = "complaint_histogram"
    PRICE_HISTOGRAM = "price_histogram"
    AGENT_RANKINGS = "agent_rankings"
    TOTAL_REVIEWS = "total_reviews"


class LogMessage(StrEnum):
    """Log message templates."""

    FETCHING_PAGE = "Fetching review page {} (limit {})..."
    RETRIEVED_PAGE = "Retrieved {} reviews on page {} (total: {})"
    FETCHING_ALL = "Fetching full review collection ({} reviews)..."
    FETCHED_ALL = "Fetched {} reviews into the full collection"
    FULL_LOAD_JOINED = "Full collection load already in flight, waiting for it"
    FULL_LOAD_FAILED = "Full collection load failed: {}"
    STALE_PAGE = "Discarding stale page response #{} (last applied #{})"
    DUPLICATE_REVIEW = "Dropping duplicate review {} from {}"
    FILTERS_APPLIED = "Applied filters: {}"
    FILTERS_CLEARED = "Cleared all filters"
    DRAFT_DEBOUNCED = "Draft filters settled: {}"
    TAGS_UPDATING = "Updating tags for review {}: {}"
    TAGS_UPDATED = "Updated tags for review {}"
    TAGS_REVERTED = "Reverted optimistic tag update for review {}"
    SESSION_EXPIRED = "Session expired while calling {}"
    REQUEST_FAILED = "Request to {} failed: {}"
    SAVED_REVIEWS = "Saved {} reviews to {}"
    SAVED_SNAPSHOT = "Saved analytics snapshot to {}"
    ERROR_OCCURRED = "Error occurred: {}"


class NotifyMessage(StrEnum):
    """User-facing notification texts."""

    NO_TOKEN = "No authentication token found. Please log in."
    SESSION_EXPIRED = "Session expired. Please log in again."
    LOAD_FAILED = "Failed to load dashboard data: {}"
    TAGS_UPDATED = "Review tags updated successfully!"
    TAGS_FAILED = "Failed to update review tags: {}"
    NOT_ALLOWED = "Only administrators can edit review tags."


class CliHelp(StrEnum):
    """CLI help messages."""

    APP = "Review feedback dashboard"
    PAGE = "Page number to display."
    PAGE_SIZE = "Number of reviews per page."
    BASE_URL = "Base URL of the review API."
    TOKEN = "Bearer token for the review API."
    ROLE = "Role of the authenticated user."
    LOCATION = "Filter by location (case-insensitive substring)."
    ORDER_TYPE = "Filter by order type."
    DISCOUNT = "Filter by discount applied (integer part)."
    RATING = "Filter by star rating."
    PERFORMANCE = "Filter by, or set, the performance tag."
    ACCURACY = "Filter by, or set, the accuracy tag."
    SENTIMENT = "Filter by, or set, the sentiment tag."
    EXPORT_JSON = "Write the filtered reviews and metrics to this JSON file."
    EXPORT_CSV = "Write the filtered reviews to this CSV file."
    EXPORT_METRICS = "Write the metrics of the filtered reviews to this JSON file."
    LOG_LEVEL = "Log level for console output."
    SHOW_COMMAND = """Fetch reviews, apply filters and print the dashboard.

Shows the current page of (filtered) reviews together with the derived
metrics: average rating, top and bottom agents, complaints and price ranges."""
    TAG_COMMAND = "Update the performance, accuracy or sentiment tags of a review."
