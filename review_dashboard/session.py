"""Explicit authorization context passed into privileged operations."""

from collections.abc import Callable
from dataclasses import dataclass, field

from loguru import logger

from .constants import ELEVATED_ROLE, EMPTY_STRING


@dataclass
class SessionContext:
    """Credential and role of the current user.

    The dashboard never stores or refreshes credentials itself; it only
    reads them here and asks the owner to invalidate the session when the
    remote side reports it as expired.

    Attributes:
        credential: Opaque bearer token, None when not logged in.
        role: Role name of the user, compared against the elevated role.
        on_invalidate: Hook run when the session must be torn down
            (clear stored tokens, redirect to login, ...).
    """

    credential: str | None = None
    role: str = EMPTY_STRING
    on_invalidate: Callable[[], None] | None = field(default=None, repr=False)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.credential)

    @property
    def is_elevated(self) -> bool:
        return self.is_authenticated and self.role == ELEVATED_ROLE

    def invalidate(self) -> None:
        """Drop the credential and run the invalidation hook once."""
        logger.warning("Invalidating session for role {!r}", self.role)
        self.credential = None
        if self.on_invalidate is not None:
            self.on_invalidate()
