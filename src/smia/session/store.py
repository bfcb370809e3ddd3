"""
Local session store.

Holds the client's belief about the authenticated session. Sessions are
immutable, so every mutation replaces the whole value.
"""

from smia.logger import get_logger
from smia.models import Session

logger = get_logger(__name__)


class SessionStore:
    """Single-owner holder of the current ``Session``."""

    def __init__(self, session: Session | None = None):
        self._session = session or Session.empty()

    def get(self) -> Session:
        return self._session

    def set(self, session: Session) -> None:
        logger.debug(
            f"Session set: logged_in={session.is_logged_in} "
            f"user={session.username!r} partition={session.partition_id!r}"
        )
        self._session = session

    def clear(self) -> None:
        logger.debug("Session cleared")
        self._session = Session.empty()

    @property
    def is_logged_in(self) -> bool:
        return self._session.is_logged_in
