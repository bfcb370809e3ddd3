"""
Append-only Output Log.

Every user-visible outcome (connection status, command results, warnings)
lands here as a ``CommandResult``. A running command is represented by a
provisional entry that is later committed in place through its handle.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, Optional

RUNNING_MESSAGE = "Ejecutando..."


def _now() -> str:
    return datetime.now().strftime("%H:%M:%S")


@dataclass(frozen=True)
class CommandResult:
    """A single Output Log entry."""

    command: str
    output: str
    timestamp: str
    is_error: bool = False
    is_running: bool = False


@dataclass(frozen=True)
class CommandHandle:
    """Reference to a provisional entry returned by ``begin_command``."""

    index: int
    command: str


class OutputLog:
    """
    Append-only sequence of ``CommandResult`` entries.

    The only mutation besides appending is ``commit_command``, which replaces
    a provisional entry at its recorded index exactly once.
    """

    def __init__(self, clock: Callable[[], str] = _now):
        self._entries: list[CommandResult] = []
        self._open: set[int] = set()
        self._clock = clock
        self._listeners: list[Callable[[CommandResult], None]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CommandResult]:
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> CommandResult:
        return self._entries[index]

    @property
    def entries(self) -> list[CommandResult]:
        return list(self._entries)

    def subscribe(self, listener: Callable[[CommandResult], None]) -> None:
        """Register a callback fired for every appended or committed entry."""
        self._listeners.append(listener)

    def _notify(self, entry: CommandResult) -> None:
        for listener in self._listeners:
            listener(entry)

    def append(self, command: str, output: str, is_error: bool = False) -> CommandResult:
        entry = CommandResult(
            command=command,
            output=output,
            timestamp=self._clock(),
            is_error=is_error,
        )
        self._entries.append(entry)
        self._notify(entry)
        return entry

    def info(self, output: str, command: str = "") -> CommandResult:
        return self.append(command, output, is_error=False)

    def error(self, output: str, command: str = "") -> CommandResult:
        return self.append(command, output, is_error=True)

    def begin_command(self, command: str) -> CommandHandle:
        """Append a provisional "running" entry for ``command``."""
        entry = CommandResult(
            command=command,
            output=RUNNING_MESSAGE,
            timestamp=self._clock(),
            is_running=True,
        )
        self._entries.append(entry)
        index = len(self._entries) - 1
        self._open.add(index)
        self._notify(entry)
        return CommandHandle(index=index, command=command)

    def commit_command(
        self, handle: CommandHandle, output: str, is_error: bool = False
    ) -> CommandResult:
        """
        Replace the provisional entry behind ``handle`` with its final result.

        Raises:
            ValueError: If the handle was already committed or never issued.
        """
        if handle.index not in self._open:
            raise ValueError(f"No pending entry for command '{handle.command}'")

        self._open.discard(handle.index)
        entry = CommandResult(
            command=handle.command,
            output=output,
            timestamp=self._clock(),
            is_error=is_error,
        )
        self._entries[handle.index] = entry
        self._notify(entry)
        return entry

    @property
    def pending(self) -> int:
        """Number of provisional entries not yet committed."""
        return len(self._open)

    def last(self) -> Optional[CommandResult]:
        return self._entries[-1] if self._entries else None
