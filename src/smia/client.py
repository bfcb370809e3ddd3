"""
Async client for the remote filesystem service.

Every call returns an explicit result value instead of raising: ``Success``
wraps the decoded payload, ``Failure`` carries the most specific message
available (server error > HTTP status > transport exception).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

import httpx
from pydantic import ValidationError

from smia.config import CONFIG
from smia.logger import get_logger
from smia.models import (
    Disk,
    DiskListResponse,
    ExecuteRequest,
    ExecuteResponse,
    FileListResponse,
    FileNode,
    FileReadResponse,
    JournalDumpResponse,
    JournalEntry,
    JournalRepairResponse,
    JournalResponse,
    SessionResponse,
)

logger = get_logger(__name__)

T = TypeVar("T")

UNKNOWN_ERROR = "Error desconocido"


class FailureKind(str, Enum):
    TRANSPORT = "transport"  # network exception, no response
    HTTP = "http"  # non-2xx status
    DOMAIN = "domain"  # 2xx with success=false
    MALFORMED = "malformed"  # 2xx with an undecodable body


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return False


RemoteResult = Union[Success[T], Failure]


def _error_from_body(response: httpx.Response) -> Optional[str]:
    """Pull a server-supplied ``error`` message out of a JSON body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None


class FilesystemClient:
    """
    JSON-over-HTTP client for the filesystem backend.

    Use as an async context manager, or call ``aclose()`` when done.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or CONFIG.backend_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else CONFIG.http_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "FilesystemClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self, method: str, path: str, payload: Optional[dict[str, Any]] = None
    ) -> RemoteResult[Any]:
        """Issue a request and decode the JSON body of a 2xx response."""
        try:
            response = await self._client.request(method, path, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            return Failure(FailureKind.TRANSPORT, f"Error de conexión: {e}")

        if not response.is_success:
            detail = _error_from_body(response)
            message = detail or (
                f"Error HTTP: {response.status_code} - {response.reason_phrase}"
            )
            logger.warning(f"{method} {path} -> {response.status_code}: {message}")
            return Failure(FailureKind.HTTP, message, response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            logger.warning(f"{method} {path} returned a non-JSON body: {e}")
            return Failure(
                FailureKind.MALFORMED,
                f"Respuesta inválida del servidor: {e}",
                response.status_code,
            )
        return Success(body)

    async def _decode(self, method: str, path: str, model, payload=None):
        """Request ``path`` and validate the body against a pydantic model."""
        result = await self._request(method, path, payload)
        if not result.ok:
            return result
        try:
            return Success(model.model_validate(result.value or {}))
        except ValidationError as e:
            logger.warning(f"{method} {path} returned an unexpected shape: {e}")
            return Failure(
                FailureKind.MALFORMED, f"Respuesta inválida del servidor: {e}"
            )

    # ─── Endpoints ───────────────────────────────────────────────────

    async def health(self) -> bool:
        """GET /health: True iff the service answered with a 2xx status."""
        try:
            response = await self._client.get("/health")
        except httpx.HTTPError as e:
            logger.debug(f"Health check failed: {e!r}")
            return False
        return response.is_success

    async def get_session(self) -> RemoteResult[SessionResponse]:
        """GET /session."""
        return await self._decode("GET", "/session", SessionResponse)

    async def execute(self, command: str) -> RemoteResult[str]:
        """
        POST /execute.

        Returns:
            Success with the server output ("" when absent), or a Failure whose
            message is the server error for ``success: false`` responses.
        """
        payload = ExecuteRequest(command=command).model_dump()
        result = await self._decode("POST", "/execute", ExecuteResponse, payload)
        if not result.ok:
            return result

        response: ExecuteResponse = result.value
        if not response.success:
            return Failure(FailureKind.DOMAIN, response.error or UNKNOWN_ERROR)
        return Success(response.output or "")

    async def list_disks(self, mounted_only: bool = False) -> RemoteResult[list[Disk]]:
        """GET /disks or GET /disks/mounted."""
        path = "/disks/mounted" if mounted_only else "/disks"
        result = await self._decode("GET", path, DiskListResponse)
        if not result.ok:
            return result
        return Success(result.value.disks)

    async def list_files(
        self, partition_id: str, path: str = "/"
    ) -> RemoteResult[list[FileNode]]:
        """POST /files."""
        payload = {"partitionId": partition_id, "path": path}
        result = await self._decode("POST", "/files", FileListResponse, payload)
        if not result.ok:
            return result
        return Success(result.value.files)

    async def read_file(self, partition_id: str, path: str) -> RemoteResult[str]:
        """POST /file/read."""
        payload = {"partitionId": partition_id, "path": path}
        result = await self._decode("POST", "/file/read", FileReadResponse, payload)
        if not result.ok:
            return result
        if not result.value.success:
            return Failure(FailureKind.DOMAIN, result.value.error or UNKNOWN_ERROR)
        return Success(result.value.content or "")

    async def journaling(self, partition_id: str) -> RemoteResult[list[JournalEntry]]:
        """POST /journaling: raw (not yet normalized) journal entries."""
        payload = {"partitionId": partition_id}
        result = await self._decode("POST", "/journaling", JournalResponse, payload)
        if not result.ok:
            return result
        if not result.value.success:
            return Failure(FailureKind.DOMAIN, result.value.error or UNKNOWN_ERROR)
        return Success(result.value.entries)

    async def repair_journal(self, partition_id: str) -> RemoteResult[int]:
        """POST /journaling/repair: number of recovered entries."""
        payload = {"partitionId": partition_id}
        result = await self._decode(
            "POST", "/journaling/repair", JournalRepairResponse, payload
        )
        if not result.ok:
            return result
        if not result.value.success:
            return Failure(FailureKind.DOMAIN, result.value.error or UNKNOWN_ERROR)
        return Success(result.value.recovered)

    async def dump_journal(self, partition_id: str) -> RemoteResult[JournalDumpResponse]:
        """POST /journaling/dump: base64 raw journal regions."""
        payload = {"partitionId": partition_id}
        result = await self._decode(
            "POST", "/journaling/dump", JournalDumpResponse, payload
        )
        if not result.ok:
            return result
        if not result.value.success:
            return Failure(FailureKind.DOMAIN, result.value.error or UNKNOWN_ERROR)
        return result
