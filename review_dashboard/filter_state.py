"""Draft and applied filter registers with a debounced draft preview."""

import asyncio
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from loguru import logger

from .constants import DEFAULT_DEBOUNCE_SECONDS, EMPTY_STRING, LogMessage
from .models import FilterCriteria

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Collapses rapid successive values into the last one after a quiet period.

    Every ``push`` cancels the pending timer and starts a new one, so a
    stale timer never fires after a newer value arrived.

    Attributes:
        delay: Quiet period in seconds.
        value: The last value that survived the quiet period.
    """

    def __init__(
        self,
        *,
        initial: T,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        on_settle: Callable[[T], None] | None = None,
    ):
        self.delay = delay
        self.value = initial
        self._on_settle = on_settle
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: T) -> None:
        """Schedule ``value`` to settle after the quiet period."""
        self.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop, no quiet period to wait out
            self._settle(value)
            return
        self._handle = loop.call_later(self.delay, self._settle, value)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def reset(self, value: T) -> None:
        """Cancel any pending value and set ``value`` immediately, silently."""
        self.cancel()
        self.value = value

    def _settle(self, value: T) -> None:
        self._handle = None
        self.value = value
        if self._on_settle is not None:
            self._on_settle(value)


class FilterStateManager:
    """Holds the draft and applied filter criteria.

    The draft follows every edit immediately. The applied criteria only
    change on ``commit`` or ``clear``, and are always replaced as a whole
    immutable value. A debounced mirror of the draft is kept for previews;
    it is never applied.

    Attributes:
        draft: Criteria as currently edited.
        applied: Criteria last committed, used for filtering.
        applied_version: Incremented every time ``applied`` is replaced.
    """

    def __init__(
        self,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        on_debounced: Callable[[FilterCriteria], None] | None = None,
    ):
        self.draft = FilterCriteria.empty()
        self.applied = FilterCriteria.empty()
        self.applied_version = 0
        self._on_debounced = on_debounced
        self._debouncer: Debouncer[FilterCriteria] = Debouncer(
            initial=FilterCriteria.empty(),
            delay=debounce_seconds,
            on_settle=self._draft_settled,
        )

    @property
    def debounced(self) -> FilterCriteria:
        return self._debouncer.value

    def set_draft_field(self, field: str, value: Any) -> FilterCriteria:
        """Replace one draft field and restart the debounce timer.

        Args:
            field: Filter field name (see ``FilterField``).
            value: New value; None clears the field, anything else is
                converted to a stripped string.

        Returns:
            FilterCriteria: The new draft.

        Raises:
            ValidationError: If ``field`` is not a filterable field.
        """
        text = EMPTY_STRING if value is None else str(value).strip()
        self.draft = self.draft.replace_field(field, text)
        self._debouncer.push(self.draft)
        return self.draft

    def commit(self, criteria: FilterCriteria | None = None) -> FilterCriteria:
        """Apply ``criteria``, or the current draft when none is given."""
        self.applied = self.draft if criteria is None else criteria
        self.applied_version += 1
        logger.info(LogMessage.FILTERS_APPLIED.format(self.applied.active() or "none"))
        return self.applied

    def clear(self) -> None:
        """Reset draft, applied and the debounced mirror to empty criteria."""
        empty = FilterCriteria.empty()
        self._debouncer.reset(empty)
        self.draft = empty
        self.applied = empty
        self.applied_version += 1
        logger.info(LogMessage.FILTERS_CLEARED)

    def _draft_settled(self, criteria: FilterCriteria) -> None:
        logger.debug(LogMessage.DRAFT_DEBOUNCED.format(criteria.active() or "none"))
        if self._on_debounced is not None:
            self._on_debounced(criteria)
