"""In-memory holder of the paged slice and the full review collection."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

from loguru import logger

from .constants import DEFAULT_PAGE_SIZE, FIRST_PAGE, LoadState, LogMessage
from .models import FilterCriteria, Review, ReviewPage, TagUpdate

FullLoader = Callable[[], Awaitable[list[Review]]]


@dataclass
class PendingPatch:
    """An optimistic tag write, kept so it can be reverted."""

    collection: list[Review]
    previous: Review
    optimistic: Review


def _unique(records: Iterable[Review], origin: str) -> list[Review]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[Review] = []
    for review in records:
        if review.id in seen:
            logger.warning(LogMessage.DUPLICATE_REVIEW.format(review.id, origin))
            continue
        seen.add(review.id)
        unique.append(review)
    return unique


def _index_of(collection: list[Review], review_id: str) -> int | None:
    for index, review in enumerate(collection):
        if review.id == review_id:
            return index
    return None


class RecordStore:
    """Owns the two review collections and decides which one is authoritative.

    The paged slice is the result of the last page fetch. The full
    collection is loaded at most once, on demand, and cached. Consumers
    ask for ``source_for(criteria)`` and never pick a collection themselves.

    All mutating methods are synchronous and meant to be called from the
    single event loop that owns the dashboard.

    Attributes:
        paged: Reviews of the last applied page.
        full: Every review, once loaded.
        page_number: Server page the paged slice belongs to.
        page_size: Page size the paged slice was fetched with.
        page_total: Total review count reported with the last page.
        full_state: Whether the full collection is not loaded, loading or loaded.
        version: Incremented on every change to either collection.
    """

    def __init__(self, *, page_size: int = DEFAULT_PAGE_SIZE):
        self.paged: list[Review] = []
        self.full: list[Review] = []
        self.page_number = FIRST_PAGE
        self.page_size = page_size
        self.page_total = 0
        self.full_state = LoadState.NOT_LOADED
        self.version = 0
        self._full_task: asyncio.Task[list[Review]] | None = None
        self._issued_seq = 0
        self._applied_seq = 0

    def source_for(self, criteria: FilterCriteria) -> list[Review]:
        """Return the collection filtering should run over.

        No criteria means the server already paginated for us, so the paged
        slice is authoritative. Any criterion needs every review.
        """
        if criteria.is_empty:
            return self.paged
        return self.full

    def analytics_source(self, criteria: FilterCriteria) -> list[Review]:
        """Return the widest collection available for metrics."""
        if self.full_state is LoadState.LOADED:
            return self.full
        return self.source_for(criteria)

    def get(self, review_id: str) -> Review | None:
        for collection in (self.full, self.paged):
            index = _index_of(collection, review_id)
            if index is not None:
                return collection[index]
        return None

    def begin_page_request(self) -> int:
        """Reserve a sequence number for a page fetch about to be issued."""
        self._issued_seq += 1
        return self._issued_seq

    def apply_page(self, seq: int, page: ReviewPage) -> bool:
        """Install a fetched page unless a newer one was already applied.

        Args:
            seq: Sequence number from ``begin_page_request``.
            page: The fetched page.

        Returns:
            bool: False if the response was stale and discarded.
        """
        if seq < self._applied_seq:
            logger.debug(LogMessage.STALE_PAGE.format(seq, self._applied_seq))
            return False
        self._applied_seq = seq
        self.paged = _unique(page.records, "page")
        self.page_number = page.page
        self.page_size = page.page_size
        self.page_total = page.total_count
        self.version += 1
        return True

    async def ensure_full_collection(self, loader: FullLoader) -> list[Review]:
        """Load the full collection once; concurrent callers share one load.

        A failed load leaves both collections untouched, resets the state to
        not loaded and propagates the error to every waiter.

        Args:
            loader: Coroutine factory fetching every review.

        Returns:
            list[Review]: The full collection.
        """
        if self.full_state is LoadState.LOADED:
            return self.full

        if self._full_task is None:
            self.full_state = LoadState.LOADING
            self._full_task = asyncio.ensure_future(self._load_full(loader))
        else:
            logger.debug(LogMessage.FULL_LOAD_JOINED)

        return await asyncio.shield(self._full_task)

    async def _load_full(self, loader: FullLoader) -> list[Review]:
        try:
            records = await loader()
            self.full = _unique(records, "full collection")
            self.full_state = LoadState.LOADED
            self.version += 1
            return self.full
        except Exception as e:
            logger.warning(LogMessage.FULL_LOAD_FAILED.format(e))
            raise
        finally:
            self._full_task = None
            if self.full_state is not LoadState.LOADED:
                self.full_state = LoadState.NOT_LOADED

    def replace_record(self, review: Review) -> bool:
        """Replace the review with the same id in both collections.

        A collection that does not hold the review is left as is.

        Returns:
            bool: True if at least one collection changed.
        """
        replaced = False
        for collection in (self.full, self.paged):
            index = _index_of(collection, review.id)
            if index is not None:
                collection[index] = review
                replaced = True
        if replaced:
            self.version += 1
        return replaced

    def apply_tags(self, review_id: str, update: TagUpdate) -> list[PendingPatch]:
        """Optimistically patch tag fields wherever the review is held."""
        patches: list[PendingPatch] = []
        for collection in (self.full, self.paged):
            index = _index_of(collection, review_id)
            if index is None:
                continue
            previous = collection[index]
            optimistic = previous.with_tags(update)
            collection[index] = optimistic
            patches.append(
                PendingPatch(collection=collection, previous=previous, optimistic=optimistic)
            )
        if patches:
            self.version += 1
        return patches

    def revert(self, patches: list[PendingPatch]) -> None:
        """Undo optimistic patches that have not been superseded since."""
        reverted = False
        for patch in patches:
            index = _index_of(patch.collection, patch.previous.id)
            if index is not None and patch.collection[index] is patch.optimistic:
                patch.collection[index] = patch.previous
                reverted = True
        if reverted:
            self.version += 1
