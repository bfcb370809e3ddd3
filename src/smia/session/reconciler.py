"""
Session reconciliation.

After connectivity is established, the server's session is authoritative: if
it reports an active login, the local store is overwritten with it. Any other
outcome leaves the local session untouched.
"""

from smia.client import FilesystemClient
from smia.logger import get_logger
from smia.models import Session
from smia.state import AppState

logger = get_logger(__name__)


class SessionReconciler:
    """Seeds the local SessionStore from GET /session."""

    def __init__(self, state: AppState, client: FilesystemClient):
        self.state = state
        self.client = client

    async def reconcile(self) -> bool:
        """
        Fetch the server session and adopt it if it reports an active login.

        Returns:
            True if the local session was replaced, False otherwise.
        """
        result = await self.client.get_session()
        if not result.ok:
            logger.debug(f"Session reconciliation skipped: {result.message}")
            return False

        remote = result.value.session
        if remote is None or not remote.is_logged_in:
            logger.debug("Server reports no active session; keeping local session")
            return False

        session = Session.logged_in(
            username=remote.username,
            partition_id=remote.partition_id,
            is_root=remote.is_root,
        )
        self.state.session.set(session)
        self.state.log.info(f"🔁 Sesión sincronizada: {session.label}")
        logger.info(f"Session reconciled from server: {session.label}")
        return True
