"""
Script orchestrator.

Runs a SMIA script against the filesystem backend:

1. Rejects empty scripts and refuses to run while disconnected.
2. Gates the whole script on authentication: if any command needs a session
   and none is active, nothing is sent.
3. Executes the remaining commands strictly in order, one request at a time,
   recording a provisional entry per command and committing it in place once
   the backend answers. A failing command never stops the queue.
4. Sleeps a fixed interval after every request to bound the request rate.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional

from smia.client import FilesystemClient
from smia.commands import is_login, is_logout, parse_flags, requires_auth
from smia.config import CONFIG
from smia.logger import get_logger
from smia.models import Session
from smia.script import parse_script
from smia.session.auth import is_root_user
from smia.state import AppState

logger = get_logger(__name__)

EMPTY_SCRIPT_MESSAGE = "No hay comandos para ejecutar"
DISCONNECTED_MESSAGE = "No hay conexión con el backend. Verifica que esté ejecutándose."
AUTH_REQUIRED_MESSAGE = (
    "⚠️ Algunos comandos requieren autenticación. Por favor, inicia sesión."
)
SESSION_ACTIVE_MESSAGE = "ℹ️ Ya hay una sesión activa"
SUCCESS_MESSAGE = "✅ Comando ejecutado exitosamente"
CANCELLED_MESSAGE = "⏹️ Ejecución cancelada"


class OrchestratorState(str, Enum):
    IDLE = "idle"
    GATING = "gating"
    BLOCKED_ON_AUTH = "blocked_on_auth"
    EXECUTING = "executing"


class ExecutionOutcome(str, Enum):
    COMPLETED = "completed"
    EMPTY = "empty"
    DISCONNECTED = "disconnected"
    AUTH_REQUIRED = "auth_required"
    CANCELLED = "cancelled"


class ScriptOrchestrator:
    """
    Executes scripts sequentially against the backend.

    Args:
        state: Shared application state (session, Output Log, connectivity).
        client: Backend client.
        throttle_seconds: Delay after every request. Defaults to configuration.
        sleep: Awaitable sleep function, replaceable in tests.
        on_auth_required: Called when the auth gate blocks a script.
        on_idle: Called whenever an invocation finishes, however it ends.
    """

    def __init__(
        self,
        state: AppState,
        client: FilesystemClient,
        throttle_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_auth_required: Optional[Callable[[], None]] = None,
        on_idle: Optional[Callable[[], None]] = None,
    ):
        self.state = state
        self.client = client
        self.throttle_seconds = (
            CONFIG.throttle_seconds if throttle_seconds is None else throttle_seconds
        )
        self._sleep = sleep
        self.on_auth_required = on_auth_required
        self.on_idle = on_idle
        self.status = OrchestratorState.IDLE
        self._cancel_requested = False

    @property
    def is_running(self) -> bool:
        return self.status != OrchestratorState.IDLE

    def cancel(self) -> None:
        """Stop after the command currently in flight; the rest are skipped."""
        if self.status == OrchestratorState.EXECUTING:
            logger.info("Cancellation requested")
            self._cancel_requested = True

    async def execute(self, script_text: str) -> ExecutionOutcome:
        """Run ``script_text``. Results are appended to the Output Log."""
        if self.is_running:
            raise RuntimeError("A script is already running")

        self._cancel_requested = False
        self.status = OrchestratorState.GATING
        try:
            return await self._run(script_text)
        finally:
            self.status = OrchestratorState.IDLE
            self._cancel_requested = False
            if self.on_idle:
                self.on_idle()

    async def _run(self, script_text: str) -> ExecutionOutcome:
        log = self.state.log

        queue = parse_script(script_text or "")
        if not queue:
            log.error(EMPTY_SCRIPT_MESSAGE)
            return ExecutionOutcome.EMPTY

        if not self.state.connected:
            log.error(DISCONNECTED_MESSAGE)
            return ExecutionOutcome.DISCONNECTED

        # Gate on a point-in-time snapshot; not re-checked per command.
        session = self.state.session.get()
        if not session.is_logged_in and any(requires_auth(cmd) for cmd in queue):
            self.status = OrchestratorState.BLOCKED_ON_AUTH
            log.error(AUTH_REQUIRED_MESSAGE)
            logger.info("Script blocked: authentication required")
            if self.on_auth_required:
                self.on_auth_required()
            return ExecutionOutcome.AUTH_REQUIRED

        self.status = OrchestratorState.EXECUTING
        logger.info(f"Executing script with {len(queue)} commands")

        for position, command in enumerate(queue):
            if self._cancel_requested:
                skipped = len(queue) - position
                log.error(CANCELLED_MESSAGE)
                logger.info(f"Script cancelled, {skipped} commands skipped")
                return ExecutionOutcome.CANCELLED

            if is_login(command) and self.state.session.is_logged_in:
                log.info(SESSION_ACTIVE_MESSAGE, command=command)
                continue

            await self._dispatch(command)
            await self._sleep(self.throttle_seconds)

        return ExecutionOutcome.COMPLETED

    async def _dispatch(self, command: str) -> None:
        """Send one command and commit its provisional log entry."""
        log = self.state.log
        handle = log.begin_command(command)

        result = await self.client.execute(command)

        if result.ok:
            log.commit_command(handle, result.value or SUCCESS_MESSAGE)
            self._apply_session_change(command)
        else:
            logger.debug(f"Command failed: {command!r}: {result.message}")
            log.commit_command(handle, result.message, is_error=True)

    def _apply_session_change(self, command: str) -> None:
        """Mirror a successful scripted login/logout into the local session."""
        if is_logout(command):
            self.state.session.clear()
            return

        if is_login(command):
            flags = parse_flags(command)
            username = flags.get("user", "")
            partition_id = flags.get("id", "")
            if username and partition_id:
                self.state.session.set(
                    Session.logged_in(
                        username=username,
                        partition_id=partition_id,
                        is_root=is_root_user(username),
                    )
                )
