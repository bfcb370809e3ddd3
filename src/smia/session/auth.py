"""
Interactive login and logout.

Login is synthesized as a regular ``login`` command sent to POST /execute;
on success the local session is bound to the chosen partition.
"""

from typing import Iterable, Optional

from smia.client import FailureKind, FilesystemClient, RemoteResult, Success
from smia.logger import get_logger
from smia.models import Disk, Partition, Session
from smia.state import AppState

logger = get_logger(__name__)

ROOT_USER = "root"


def is_root_user(username: str) -> bool:
    return username.strip().lower() == ROOT_USER


def login_command(username: str, password: str, partition_id: str) -> str:
    return f"login -user={username} -pass={password} -id={partition_id}"


def default_partition(disks: Iterable[Disk]) -> Optional[Partition]:
    """Return the first mounted partition across the given disks, if any."""
    for disk in disks:
        for partition in disk.partitions:
            if partition.is_mounted:
                return partition
    return None


class Authenticator:
    """Performs login/logout against the backend and updates the session."""

    def __init__(self, state: AppState, client: FilesystemClient):
        self.state = state
        self.client = client

    async def login(
        self, username: str, password: str, partition_id: str
    ) -> RemoteResult[Session]:
        """
        Log in as ``username`` on ``partition_id``.

        Returns:
            Success with the new session, or the Failure reported by the backend.
        """
        result = await self.client.execute(
            login_command(username, password, partition_id)
        )
        if not result.ok:
            logger.warning(f"Login failed for {username}@{partition_id}: {result.message}")
            return result

        session = Session.logged_in(
            username=username,
            partition_id=partition_id,
            is_root=is_root_user(username),
        )
        self.state.session.set(session)
        self.state.log.info(f"✅ Sesión iniciada: {session.label}")
        logger.info(f"Logged in as {session.label}")
        return Success(session)

    async def logout(self) -> bool:
        """
        Close the active session.

        The local session is cleared only when the backend accepted the request.
        Returns False when there was nothing to log out or the request failed.
        """
        if not self.state.session.is_logged_in:
            return False

        result = await self.client.execute("logout")
        # Any 2xx answer means the backend processed the logout.
        if not result.ok and result.kind not in (
            FailureKind.DOMAIN,
            FailureKind.MALFORMED,
        ):
            self.state.log.error("Error al cerrar sesión", command="logout")
            return False

        self.state.session.clear()
        self.state.log.info("✅ Sesión cerrada exitosamente", command="logout")
        logger.info("Logged out")
        return True
