"""Shared pytest fixtures: a scriptable fake backend and app state."""

import json

import httpx
import pytest

from smia.client import FilesystemClient
from smia.models import Session
from smia.state import AppState


class FakeBackend:
    """
    In-process stand-in for the filesystem backend, served via MockTransport.

    ``execute_responses`` is a queue consumed by POST /execute; each item is a
    JSON body (dict), an ``httpx.Response``, or an exception to raise.
    Other endpoints answer from ``routes`` (path -> body).
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.health_status = 200
        self.health_body: object = {"status": "ok"}
        self.session_body = {"success": True, "session": {"isLoggedIn": False}}
        self.execute_responses: list = []
        self.routes: dict[str, object] = {}

    @property
    def executed(self) -> list[str]:
        return [
            json.loads(r.content)["command"]
            for r in self.requests
            if r.url.path == "/execute"
        ]

    def _answer(self, item):
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/health":
            if isinstance(self.health_body, str):
                return httpx.Response(self.health_status, text=self.health_body)
            return httpx.Response(self.health_status, json=self.health_body)
        if path == "/session":
            return self._answer(self.session_body)
        if path == "/execute":
            if self.execute_responses:
                return self._answer(self.execute_responses.pop(0))
            return httpx.Response(200, json={"success": True, "output": "ok"})
        if path in self.routes:
            return self._answer(self.routes[path])
        return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    return FilesystemClient(
        base_url="http://testserver",
        timeout=5.0,
        transport=httpx.MockTransport(backend.handler),
    )


@pytest.fixture
def state():
    """Connected state with no session."""
    return AppState(connected=True)


@pytest.fixture
def logged_in_state():
    """Connected state with a non-root session on partition 341A."""
    state = AppState(connected=True)
    state.session.set(Session.logged_in("user1", "341A", is_root=False))
    return state


@pytest.fixture
def sample_disks():
    return {
        "disks": [
            {
                "path": "/home/user/Disco1.mia",
                "size": 10,
                "unit": "M",
                "fit": "FF",
                "partitions": [
                    {
                        "name": "Part1",
                        "id": "341A",
                        "size": 1048576,
                        "type": "P",
                        "isMounted": True,
                        "status": "1",
                    },
                    {
                        "name": "Part2",
                        "id": "342A",
                        "size": 2097152,
                        "type": "P",
                        "isMounted": True,
                        "status": "1",
                    },
                    {
                        "name": "Part3",
                        "id": "",
                        "size": 524288,
                        "type": "P",
                        "isMounted": False,
                        "status": "0",
                    },
                ],
            }
        ],
        "count": 1,
    }
