"""
Connectivity management.

Checks the backend health endpoint, keeps the connectivity flag in AppState
current, and reconciles the session on every successful connection.
"""

from smia.client import FilesystemClient
from smia.logger import get_logger
from smia.session.reconciler import SessionReconciler
from smia.state import AppState

logger = get_logger(__name__)


class ConnectionManager:
    def __init__(self, state: AppState, client: FilesystemClient):
        self.state = state
        self.client = client
        self.reconciler = SessionReconciler(state, client)

    async def connect(self) -> bool:
        """
        Probe GET /health and, when reachable, reconcile the session.

        Returns:
            The resulting connectivity flag.
        """
        if await self.client.health():
            self.state.connected = True
            self.state.log.info("🟢 Conectado al backend")
            logger.info(f"Connected to backend at {self.client.base_url}")
            await self.reconciler.reconcile()
        else:
            self.state.connected = False
            self.state.log.error(
                "🔴 Backend no disponible. Asegúrate de que esté ejecutándose."
            )
            logger.warning(f"Backend unreachable at {self.client.base_url}")
        return self.state.connected

    async def reconnect(self) -> bool:
        """User-initiated reconnection attempt."""
        self.state.log.info("Intentando reconectar...")
        return await self.connect()
