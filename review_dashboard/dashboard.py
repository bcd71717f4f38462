"""Coordinates filters, the record store, pagination and analytics."""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger

from .analytics import AnalyticsAggregator
from .client import ReviewDataSource
from .constants import (
    DEFAULT_DEBOUNCE_SECONDS,
    DEFAULT_PAGE_SIZE,
    FIRST_PAGE,
    LoadState,
    NotifyMessage,
)
from .errors import DashboardError, SessionExpired, TransportFailure, Unauthorized
from .filter_state import FilterStateManager
from .filters import filter_reviews
from .models import AnalyticsSnapshot, PaginationState, Review, TagUpdate
from .notifications import LoggerNotifier, Notifier
from .pagination import change_page, page_slice, paginate
from .session import SessionContext
from .store import RecordStore
from .tags import TagMutationWorkflow

T = TypeVar("T")


@dataclass(frozen=True)
class _DerivedViews:
    filtered: list[Review]
    metrics: AnalyticsSnapshot


class ReviewDashboard:
    """State and derived views of the review dashboard.

    Without applied filters the dashboard shows the server's current page
    and paginates with the server's total count. With filters it filters
    the full collection (loaded once, on demand) and paginates locally.
    Filtered reviews and metrics are cached until either the store or the
    applied filters change.

    Attributes:
        data_source: Remote data access.
        session: Credential and role of the current user.
        store: Paged slice and full collection.
        filters: Draft and applied filter criteria.
        page_size: Reviews per page.
        requested_page: Page the user asked for in filtered mode.
        external_summary: Last analytics summary reported by the server.
        last_error: Message of the last failed operation, if any.
    """

    def __init__(
        self,
        *,
        data_source: ReviewDataSource,
        session: SessionContext,
        page_size: int = DEFAULT_PAGE_SIZE,
        notifier: Notifier | None = None,
        load_full_collection: bool = True,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        aggregator: AnalyticsAggregator | None = None,
    ):
        """Initialize the ReviewDashboard.

        Args:
            data_source: Remote data access.
            session: Credential and role of the current user.
            page_size: Reviews per page.
            notifier: Sink for user-facing messages; logs by default.
            load_full_collection: Load every review with the first page, so
                metrics cover more than the visible page.
            debounce_seconds: Quiet period of the draft filter preview.
            aggregator: Analytics aggregator to use.
        """
        self.data_source = data_source
        self.session = session
        self.page_size = page_size
        self.notifier = notifier or LoggerNotifier()
        self.load_full_collection = load_full_collection
        self.aggregator = aggregator or AnalyticsAggregator()

        self.store = RecordStore(page_size=page_size)
        self.filters = FilterStateManager(debounce_seconds=debounce_seconds)
        self.tags = TagMutationWorkflow(
            data_source=data_source, store=self.store, notifier=self.notifier
        )

        self.requested_page = FIRST_PAGE
        self.external_summary: dict[str, Any] | None = None
        self.last_error: str | None = None

        self._views_key: tuple[int, int] | None = None
        self._views: _DerivedViews | None = None
        self._handled_expiry: SessionExpired | None = None

    @property
    def is_filtered(self) -> bool:
        return not self.filters.applied.is_empty

    async def load_page(self, page: int = FIRST_PAGE) -> PaginationState:
        """Fetch a server page together with the server's analytics summary.

        On the first page the full collection is loaded too, when enabled.

        Args:
            page: 1-based page number.

        Returns:
            PaginationState: Pagination after the load.
        """
        self._require_session()
        seq = self.store.begin_page_request()
        credential = self.session.credential

        review_page, summary = await self._guarded(
            asyncio.gather(
                self.data_source.fetch_page(page, self.page_size, credential),
                self.data_source.fetch_analytics_summary(credential),
            )
        )

        if self.store.apply_page(seq, review_page):
            self.external_summary = summary
            if not self.is_filtered:
                self.requested_page = review_page.page

        if self.load_full_collection and page == FIRST_PAGE:
            await self._ensure_full_collection()

        self.last_error = None
        return self.pagination()

    def set_filter(self, field: str, value: Any) -> None:
        """Edit one draft filter field; nothing is applied yet."""
        self.filters.set_draft_field(field, value)

    async def apply_filters(self) -> PaginationState:
        """Apply the draft filters and recompute pagination.

        Loads the full collection the first time a non-empty filter is
        applied. The draft is committed only once that load succeeded; on
        failure the previous filters stay applied and the next apply
        retries the load.
        """
        criteria = self.filters.draft
        if not criteria.is_empty and self.store.full_state is not LoadState.LOADED:
            self._require_session()
            await self._ensure_full_collection()

        self.filters.commit(criteria)
        state = self.pagination()
        self.requested_page = state.current_page
        return state

    async def clear_filters(self) -> PaginationState:
        """Drop all filters and go back to the first page.

        When the store holds a later server page, page 1 is fetched again;
        without a credential that raises ``Unauthorized`` like ``load_page``.
        """
        self.filters.clear()
        self.requested_page = FIRST_PAGE
        if self.store.page_number != FIRST_PAGE:
            return await self.load_page(FIRST_PAGE)
        return self.pagination()

    async def change_page(self, new_page: int) -> PaginationState:
        """Go to ``new_page``; out-of-range pages are ignored."""
        current = self.pagination()
        target = change_page(current, new_page)
        if target is current:
            return current

        if not self.is_filtered:
            return await self.load_page(target.current_page)

        self.requested_page = target.current_page
        return self.pagination()

    def filtered_reviews(self) -> list[Review]:
        """Every review matching the applied filters."""
        return self._derived().filtered

    def metrics(self) -> AnalyticsSnapshot:
        """Analytics over the widest available collection, filtered."""
        return self._derived().metrics

    def pagination(self) -> PaginationState:
        if not self.is_filtered:
            return paginate(self.store.page_total, self.store.page_number, self.page_size)
        return paginate(len(self.filtered_reviews()), self.requested_page, self.page_size)

    def visible_reviews(self) -> list[Review]:
        """Reviews shown on the current page."""
        if not self.is_filtered:
            return list(self.store.paged)
        return page_slice(self.filtered_reviews(), self.pagination())

    async def update_tags(
        self,
        review_id: str,
        *,
        performance: str | None = None,
        accuracy: str | None = None,
        sentiment: str | None = None,
    ) -> Review:
        """Edit the tags of one review; see ``TagMutationWorkflow``."""
        try:
            update = TagUpdate(
                performance=performance, accuracy=accuracy, sentiment=sentiment
            )
            return await self.tags.update_tags(review_id, update, self.session)
        except DashboardError as e:
            self.last_error = str(e)
            raise

    def _derived(self) -> _DerivedViews:
        key = (self.store.version, self.filters.applied_version)
        if self._views is None or self._views_key != key:
            criteria = self.filters.applied
            filtered = filter_reviews(self.store.source_for(criteria), criteria)
            metrics_source = filter_reviews(self.store.analytics_source(criteria), criteria)
            self._views = _DerivedViews(
                filtered=filtered, metrics=self.aggregator.aggregate(metrics_source)
            )
            self._views_key = key
        return self._views

    async def _ensure_full_collection(self) -> list[Review]:
        def loader() -> Awaitable[list[Review]]:
            return self.data_source.fetch_all(
                self.session.credential, total_hint=self.store.page_total or None
            )

        return await self._guarded(self.store.ensure_full_collection(loader))

    def _require_session(self) -> None:
        if not self.session.is_authenticated:
            self.last_error = NotifyMessage.NO_TOKEN
            self.notifier.error(NotifyMessage.NO_TOKEN)
            raise Unauthorized(NotifyMessage.NO_TOKEN)

    async def _guarded(self, awaitable: Awaitable[T]) -> T:
        """Await a remote call, reporting failures and handling expiry."""
        try:
            return await awaitable
        except SessionExpired as e:
            self.last_error = str(e)
            # A shared load hands the same error to every waiter
            if e is not self._handled_expiry:
                self._handled_expiry = e
                self.session.invalidate()
                self.notifier.error(NotifyMessage.SESSION_EXPIRED)
            raise
        except (TransportFailure, Unauthorized) as e:
            self.last_error = str(e)
            self.notifier.error(NotifyMessage.LOAD_FAILED.format(e))
            logger.debug(f"Dashboard state left unchanged after failure: {e}")
            raise
