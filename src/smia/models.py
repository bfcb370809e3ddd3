"""
Pydantic models for the filesystem service boundary.

Covers:
- Session snapshots (local belief and GET /session payloads)
- Disk / partition / file listings
- REST request/response schemas for /execute, /file/read and /journaling

Field names are snake_case in Python; the backend's camelCase names are
accepted and emitted through aliases.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class WireModel(BaseModel):
    """Base for backend payloads: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ─── Session ─────────────────────────────────────────────────────────


class Session(WireModel):
    """
    The client's belief about who is authenticated against which partition.

    Sessions are immutable and replaced wholesale; a logged-out session never
    carries a partition or a username.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    partition_id: str = Field(default="", alias="partitionId")
    username: str = ""
    is_logged_in: bool = Field(default=False, alias="isLoggedIn")
    is_root: bool = Field(default=False, alias="isRoot")

    @model_validator(mode="after")
    def _logged_out_is_empty(self) -> "Session":
        if not self.is_logged_in and (self.partition_id or self.username):
            raise ValueError(
                "A logged-out session cannot carry a partition or username"
            )
        return self

    @classmethod
    def empty(cls) -> "Session":
        return cls()

    @classmethod
    def logged_in(cls, username: str, partition_id: str, is_root: bool) -> "Session":
        return cls(
            partition_id=partition_id,
            username=username,
            is_logged_in=True,
            is_root=is_root,
        )

    @property
    def label(self) -> str:
        """``user@partition`` display label."""
        return f"{self.username}@{self.partition_id}"


class SessionResponse(WireModel):
    """GET /session response."""

    session: Optional[Session] = None


# ─── Disks, partitions, files ────────────────────────────────────────


class Partition(WireModel):
    """Read-only snapshot of a partition; identity is ``id``."""

    name: str = ""
    id: str = ""
    size: int = 0
    type: str = ""
    is_mounted: bool = Field(default=False, alias="isMounted")
    status: str = ""


class Disk(WireModel):
    """Read-only snapshot of a disk image and its partition table."""

    path: str = ""
    size: int = 0
    unit: str = ""
    fit: str = ""
    partitions: list[Partition] = Field(default_factory=list)


class DiskListResponse(WireModel):
    """GET /disks and GET /disks/mounted response."""

    disks: list[Disk] = Field(default_factory=list)


class FileNode(WireModel):
    """An entry of a directory listing returned by POST /files."""

    name: str
    type: str = "file"
    size: int = 0
    permissions: str = ""
    owner: str = ""
    group: str = ""
    content: Optional[str] = None
    children: Optional[list["FileNode"]] = None

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"


class FileListResponse(WireModel):
    """POST /files response."""

    files: list[FileNode] = Field(default_factory=list)


# ─── Commands ────────────────────────────────────────────────────────


class ExecuteRequest(WireModel):
    """POST /execute request body."""

    command: str


class ExecuteResponse(WireModel):
    """POST /execute response."""

    success: bool = False
    output: Optional[str] = None
    error: Optional[str] = None


class FileReadResponse(WireModel):
    """POST /file/read response."""

    success: bool = False
    content: Optional[str] = None
    error: Optional[str] = None


# ─── Journaling ──────────────────────────────────────────────────────


class JournalEntry(WireModel):
    """
    A recorded filesystem mutation.

    Raw entries carry ``timestamp`` as epoch seconds in a string; normalized
    entries carry a localized date-time string instead.
    """

    operation: str = ""
    path: str = ""
    content: str = ""
    timestamp: str = ""
    user: str = ""
    permissions: str = ""


class JournalResponse(WireModel):
    """POST /journaling response."""

    success: bool = False
    entries: list[JournalEntry] = Field(default_factory=list)
    error: Optional[str] = None


class JournalRepairResponse(WireModel):
    """POST /journaling/repair response."""

    success: bool = False
    recovered: int = 0
    error: Optional[str] = None


class JournalDumpResponse(WireModel):
    """POST /journaling/dump response (base64-encoded raw regions)."""

    success: bool = False
    candidate1: str = ""
    preferred: str = ""
    error: Optional[str] = None
