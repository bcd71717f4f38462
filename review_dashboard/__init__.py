"""Review feedback dashboard: filtering, pagination and analytics."""

from .analytics import AnalyticsAggregator, aggregate
from .client import ReviewApiClient, ReviewDataSource
from .dashboard import ReviewDashboard
from .errors import (
    DashboardError,
    SessionExpired,
    TransportFailure,
    Unauthorized,
    ValidationError,
)
from .filter_state import Debouncer, FilterStateManager
from .filters import filter_reviews, matches
from .models import (
    AgentRating,
    AnalyticsSnapshot,
    FilterCriteria,
    PaginationState,
    Review,
    ReviewPage,
    TagUpdate,
)
from .pagination import change_page, page_slice, paginate
from .session import SessionContext
from .storage import ReviewStorage
from .store import RecordStore
from .tags import TagMutationWorkflow

__all__ = [
    "AgentRating",
    "AnalyticsAggregator",
    "AnalyticsSnapshot",
    "DashboardError",
    "Debouncer",
    "FilterCriteria",
    "FilterStateManager",
    "PaginationState",
    "RecordStore",
    "Review",
    "ReviewApiClient",
    "ReviewDashboard",
    "ReviewDataSource",
    "ReviewPage",
    "ReviewStorage",
    "SessionContext",
    "SessionExpired",
    "TagMutationWorkflow",
    "TagUpdate",
    "TransportFailure",
    "Unauthorized",
    "ValidationError",
    "aggregate",
    "change_page",
    "filter_reviews",
    "matches",
    "page_slice",
    "paginate",
]
