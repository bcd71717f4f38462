"""Editing the tag fields of a single review."""

from loguru import logger

from .client import ReviewDataSource
from .constants import LogMessage, NotifyMessage
from .errors import SessionExpired, TransportFailure, Unauthorized, ValidationError
from .models import Review, TagUpdate
from .notifications import LoggerNotifier, Notifier
from .session import SessionContext
from .store import PendingPatch, RecordStore


class TagMutationWorkflow:
    """Applies a tag update to one review in both store collections.

    The patch is written optimistically, persisted remotely, then replaced
    by the canonical record the server returns. Any failure reverts the
    optimistic write, so the store ends up exactly as it was.

    Attributes:
        data_source: Remote data access.
        store: The record store holding both collections.
        notifier: Sink for user-facing outcome messages.
    """

    def __init__(
        self,
        *,
        data_source: ReviewDataSource,
        store: RecordStore,
        notifier: Notifier | None = None,
    ):
        self.data_source = data_source
        self.store = store
        self.notifier = notifier or LoggerNotifier()

    async def update_tags(
        self, review_id: str, update: TagUpdate, session: SessionContext
    ) -> Review:
        """Persist a tag update and reconcile it into the store.

        Args:
            review_id: Id of the review to update.
            update: Tag fields to set.
            session: Credential and role of the caller.

        Returns:
            Review: The updated review as returned by the server.

        Raises:
            Unauthorized: If the caller is not logged in as an administrator.
            ValidationError: If the update sets no field.
            SessionExpired: If the server rejected the credential.
            TransportFailure: If the update could not be persisted.
        """
        if not session.is_authenticated:
            self.notifier.error(NotifyMessage.NO_TOKEN)
            raise Unauthorized(NotifyMessage.NO_TOKEN)
        if not session.is_elevated:
            self.notifier.error(NotifyMessage.NOT_ALLOWED)
            raise Unauthorized(NotifyMessage.NOT_ALLOWED)
        if update.is_empty:
            raise ValidationError(f"No tag fields given for review {review_id}")

        logger.info(LogMessage.TAGS_UPDATING.format(review_id, update.to_payload()))
        patches = self.store.apply_tags(review_id, update)

        try:
            updated = await self.data_source.persist_tag_update(
                review_id, update, session.credential
            )
        except SessionExpired:
            self._revert(review_id, patches)
            session.invalidate()
            self.notifier.error(NotifyMessage.SESSION_EXPIRED)
            raise
        except (TransportFailure, Unauthorized) as e:
            self._revert(review_id, patches)
            self.notifier.error(NotifyMessage.TAGS_FAILED.format(e))
            raise
        except Exception:
            self._revert(review_id, patches)
            raise

        self.store.replace_record(updated)
        logger.success(LogMessage.TAGS_UPDATED.format(review_id))
        self.notifier.success(NotifyMessage.TAGS_UPDATED)
        return updated

    def _revert(self, review_id: str, patches: list[PendingPatch]) -> None:
        if patches:
            self.store.revert(patches)
            logger.warning(LogMessage.TAGS_REVERTED.format(review_id))
