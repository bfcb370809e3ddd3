"""
Unit tests for the script orchestrator.
"""

import asyncio

import httpx
import pytest

from smia.client import FilesystemClient
from smia.models import Session
from smia.orchestrator import (
    AUTH_REQUIRED_MESSAGE,
    DISCONNECTED_MESSAGE,
    EMPTY_SCRIPT_MESSAGE,
    SESSION_ACTIVE_MESSAGE,
    SUCCESS_MESSAGE,
    ExecutionOutcome,
    OrchestratorState,
    ScriptOrchestrator,
)


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _orchestrator(state, client, **kwargs):
    sleep = RecordingSleep()
    orchestrator = ScriptOrchestrator(
        state, client, throttle_seconds=0.3, sleep=sleep, **kwargs
    )
    return orchestrator, sleep


class TestRejectedScripts:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("script", ["", "   \n\n", "# only\n   # comments\n\n"])
    async def test_empty_or_comment_only(self, backend, client, logged_in_state, script):
        orchestrator, _ = _orchestrator(logged_in_state, client)

        outcome = await orchestrator.execute(script)

        assert outcome == ExecutionOutcome.EMPTY
        assert backend.requests == []
        assert len(logged_in_state.log) == 1
        assert logged_in_state.log[0].is_error
        assert logged_in_state.log[0].output == EMPTY_SCRIPT_MESSAGE

    @pytest.mark.asyncio
    async def test_disconnected(self, backend, client, logged_in_state):
        logged_in_state.connected = False
        orchestrator, _ = _orchestrator(logged_in_state, client)

        outcome = await orchestrator.execute("mkdisk -size=5")

        assert outcome == ExecutionOutcome.DISCONNECTED
        assert backend.requests == []
        assert logged_in_state.log.last().output == DISCONNECTED_MESSAGE


class TestAuthGate:
    @pytest.mark.asyncio
    async def test_blocks_whole_script_without_session(self, backend, client, state):
        signals = []
        orchestrator, _ = _orchestrator(
            state,
            client,
            on_auth_required=lambda: signals.append("auth"),
            on_idle=lambda: signals.append("idle"),
        )

        outcome = await orchestrator.execute(
            "mkdisk -size=5 -path=/d.mia\nmount -path=/d.mia -name=P1\nmkdir -path=/a"
        )

        assert outcome == ExecutionOutcome.AUTH_REQUIRED
        assert backend.requests == []
        assert len(state.log) == 1
        assert state.log[0].output == AUTH_REQUIRED_MESSAGE
        assert state.log[0].is_error
        assert signals == ["auth", "idle"]
        assert orchestrator.status == OrchestratorState.IDLE

    @pytest.mark.asyncio
    async def test_commented_protected_command_does_not_gate(self, backend, client, state):
        orchestrator, _ = _orchestrator(state, client)

        outcome = await orchestrator.execute("# mkdir -path=/a\nmkdisk -size=5")

        assert outcome == ExecutionOutcome.COMPLETED
        assert backend.executed == ["mkdisk -size=5"]

    @pytest.mark.asyncio
    async def test_unprotected_script_runs_without_session(self, backend, client, state):
        orchestrator, _ = _orchestrator(state, client)
        await orchestrator.execute("mkdisk -size=5\nfdisk -size=1 -name=P1")
        assert backend.executed == ["mkdisk -size=5", "fdisk -size=1 -name=P1"]


class TestExecution:
    @pytest.mark.asyncio
    async def test_scenario_comment_is_skipped(self, backend, client, logged_in_state):
        backend.execute_responses = [
            {"success": True, "output": "ok"},
            {"success": True, "output": "ok"},
        ]
        orchestrator, _ = _orchestrator(logged_in_state, client)

        outcome = await orchestrator.execute(
            "mkdir -path=/a\n# comment\nmkfile -path=/a/b.txt"
        )

        assert outcome == ExecutionOutcome.COMPLETED
        entries = logged_in_state.log.entries
        assert [(e.command, e.output, e.is_error) for e in entries] == [
            ("mkdir -path=/a", "ok", False),
            ("mkfile -path=/a/b.txt", "ok", False),
        ]

    @pytest.mark.asyncio
    async def test_failure_does_not_abort_queue(self, backend, client, logged_in_state):
        backend.execute_responses = [
            {"success": False, "error": "disk full"},
            {"success": True, "output": "ok"},
        ]
        orchestrator, _ = _orchestrator(logged_in_state, client)

        await orchestrator.execute("mkfile -path=/big.bin\nmkdir -path=/b")

        entries = logged_in_state.log.entries
        assert len(entries) == 2
        assert entries[0].is_error and entries[0].output == "disk full"
        assert not entries[1].is_error and entries[1].output == "ok"

    @pytest.mark.asyncio
    async def test_n_commands_yield_n_ordered_terminal_entries(
        self, backend, client, logged_in_state
    ):
        commands = [f"mkdir -path=/d{i}" for i in range(6)]
        backend.execute_responses = [
            {"success": True, "output": "ok"},
            httpx.Response(500),
            httpx.ConnectError("reset by peer"),
            {"success": False},
            {"success": True},
            httpx.Response(200, content=b"garbage"),
        ]
        orchestrator, sleep = _orchestrator(logged_in_state, client)

        outcome = await orchestrator.execute("\n".join(commands))

        assert outcome == ExecutionOutcome.COMPLETED
        entries = logged_in_state.log.entries
        assert [e.command for e in entries] == commands
        assert not any(e.is_running for e in entries)
        assert logged_in_state.log.pending == 0
        assert [e.is_error for e in entries] == [False, True, True, True, False, True]
        assert entries[1].output == "Error HTTP: 500 - Internal Server Error"
        assert entries[2].output == "Error de conexión: reset by peer"
        assert entries[3].output == "Error desconocido"
        assert entries[4].output == SUCCESS_MESSAGE
        assert backend.executed == commands
        assert sleep.calls == [0.3] * 6

    @pytest.mark.asyncio
    async def test_commands_are_trimmed(self, backend, client, logged_in_state):
        orchestrator, _ = _orchestrator(logged_in_state, client)
        await orchestrator.execute("   mkdir -path=/a   \r\n")
        assert backend.executed == ["mkdir -path=/a"]

    @pytest.mark.asyncio
    async def test_provisional_entry_visible_while_in_flight(self, logged_in_state):
        seen = []

        def handler(request):
            seen.append([(e.output, e.is_running) for e in logged_in_state.log])
            return httpx.Response(200, json={"success": True, "output": "ok"})

        async with FilesystemClient(
            base_url="http://testserver", transport=httpx.MockTransport(handler)
        ) as client:
            orchestrator, _ = _orchestrator(logged_in_state, client)
            await orchestrator.execute("mkdir -path=/a\nmkdir -path=/b")

        assert seen == [
            [("Ejecutando...", True)],
            [("ok", False), ("Ejecutando...", True)],
        ]


class TestLoginHandling:
    @pytest.mark.asyncio
    async def test_login_skipped_when_session_active(self, backend, client, logged_in_state):
        orchestrator, sleep = _orchestrator(logged_in_state, client)

        await orchestrator.execute(
            "login -user=root -pass=123 -id=341A\nmkdir -path=/a"
        )

        assert backend.executed == ["mkdir -path=/a"]
        first = logged_in_state.log[0]
        assert first.command == "login -user=root -pass=123 -id=341A"
        assert first.output == SESSION_ACTIVE_MESSAGE
        assert not first.is_error
        assert sleep.calls == [0.3]

    @pytest.mark.asyncio
    async def test_scripted_login_binds_session(self, backend, client, state):
        orchestrator, _ = _orchestrator(state, client)

        await orchestrator.execute("mkdisk -size=5\nlogin -user=ROOT -pass=123 -id=341A")

        assert state.session.get() == Session.logged_in("ROOT", "341A", is_root=True)

    @pytest.mark.asyncio
    async def test_failed_login_leaves_session_empty(self, backend, client, state):
        backend.execute_responses = [{"success": False, "error": "Credenciales incorrectas"}]
        orchestrator, _ = _orchestrator(state, client)

        await orchestrator.execute("login -user=user1 -pass=bad -id=341A")

        assert not state.session.is_logged_in
        assert state.log.last().output == "Credenciales incorrectas"

    @pytest.mark.asyncio
    async def test_second_login_in_same_script_is_skipped(self, backend, client, state):
        orchestrator, _ = _orchestrator(state, client)

        await orchestrator.execute(
            "login -user=user1 -pass=1 -id=341A\nlogin -user=user2 -pass=2 -id=342A"
        )

        assert backend.executed == ["login -user=user1 -pass=1 -id=341A"]
        assert state.session.get().username == "user1"

    @pytest.mark.asyncio
    async def test_scripted_logout_clears_session(self, backend, client, logged_in_state):
        orchestrator, _ = _orchestrator(logged_in_state, client)
        await orchestrator.execute("logout")
        assert not logged_in_state.session.is_logged_in


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_idle_signalled_after_completion(self, client, logged_in_state):
        calls = []
        orchestrator, _ = _orchestrator(
            logged_in_state, client, on_idle=lambda: calls.append(orchestrator.status)
        )

        await orchestrator.execute("mkdir -path=/a")

        assert calls == [OrchestratorState.IDLE]
        assert not orchestrator.is_running

    @pytest.mark.asyncio
    async def test_idle_signalled_after_early_abort(self, client, state):
        calls = []
        orchestrator, _ = _orchestrator(state, client, on_idle=lambda: calls.append(1))
        await orchestrator.execute("")
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_rejects_concurrent_execution(self, client, logged_in_state):
        release = asyncio.Event()

        async def slow_sleep(seconds):
            await release.wait()

        orchestrator = ScriptOrchestrator(logged_in_state, client, sleep=slow_sleep)
        task = asyncio.create_task(orchestrator.execute("mkdir -path=/a"))
        await asyncio.sleep(0.05)

        assert orchestrator.status == OrchestratorState.EXECUTING
        with pytest.raises(RuntimeError, match="already running"):
            await orchestrator.execute("mkdir -path=/b")

        release.set()
        assert await task == ExecutionOutcome.COMPLETED

    @pytest.mark.asyncio
    async def test_cancel_between_commands(self, backend, client, logged_in_state):
        orchestrator = None

        async def cancelling_sleep(seconds):
            orchestrator.cancel()

        orchestrator = ScriptOrchestrator(
            logged_in_state, client, sleep=cancelling_sleep
        )

        outcome = await orchestrator.execute(
            "mkdir -path=/a\nmkdir -path=/b\nmkdir -path=/c"
        )

        assert outcome == ExecutionOutcome.CANCELLED
        assert backend.executed == ["mkdir -path=/a"]
        assert logged_in_state.log[0].output == "ok"
        assert logged_in_state.log.last().output == "⏹️ Ejecución cancelada"

    @pytest.mark.asyncio
    async def test_cancel_when_idle_is_ignored(self, backend, client, logged_in_state):
        orchestrator, _ = _orchestrator(logged_in_state, client)
        orchestrator.cancel()

        outcome = await orchestrator.execute("mkdir -path=/a")

        assert outcome == ExecutionOutcome.COMPLETED
        assert backend.executed == ["mkdir -path=/a"]
