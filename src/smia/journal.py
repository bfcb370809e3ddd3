"""
Journal entry normalization and filtering.

Raw entries from POST /journaling carry epoch-second timestamps; normalized
entries carry a ``dd/mm/YYYY, HH:MM:SS`` date-time string and a sentinel for
empty content.
"""

from datetime import datetime, tzinfo
from typing import Iterable, Optional

from smia.logger import get_logger
from smia.models import JournalEntry

logger = get_logger(__name__)

EMPTY_CONTENT = "(sin contenido)"
TIMESTAMP_FORMAT = "%d/%m/%Y, %H:%M:%S"

# Keywords are matched as substrings of the lower-cased operation name.
_OPERATION_KINDS: list[tuple[str, tuple[str, ...]]] = [
    ("create", ("crear", "create", "mkfile", "mkdir")),
    ("delete", ("eliminar", "delete", "remove")),
    ("edit", ("modificar", "edit")),
    ("rename", ("renombrar", "rename")),
    ("move", ("mover", "move")),
    ("copy", ("copiar", "copy")),
]


def format_timestamp(raw: str, tz: Optional[tzinfo] = None) -> str:
    """
    Render an epoch-seconds string as a local date-time.

    Non-numeric or out-of-range values are returned unchanged.
    """
    try:
        seconds = int(str(raw).strip())
        moment = datetime.fromtimestamp(seconds, tz=tz)
    except (ValueError, OverflowError, OSError):
        logger.warning(f"Journal entry has an invalid timestamp: {raw!r}")
        return raw
    return moment.strftime(TIMESTAMP_FORMAT)


def normalize(
    raw: Iterable[JournalEntry], tz: Optional[tzinfo] = None
) -> list[JournalEntry]:
    """Map raw journal entries to display-ready ones, preserving order."""
    return [
        entry.model_copy(
            update={
                "timestamp": format_timestamp(entry.timestamp, tz=tz),
                "content": entry.content or EMPTY_CONTENT,
            }
        )
        for entry in raw
    ]


def filter_entries(entries: Iterable[JournalEntry], query: str) -> list[JournalEntry]:
    """Keep entries whose operation or path contains ``query`` (case-insensitive)."""
    needle = (query or "").lower()
    return [
        entry
        for entry in entries
        if needle in entry.operation.lower() or needle in entry.path.lower()
    ]


def operation_kind(operation: str) -> str:
    """Classify an operation name as create/delete/edit/rename/move/copy/other."""
    op = operation.lower()
    for kind, keywords in _OPERATION_KINDS:
        if any(keyword in op for keyword in keywords):
            return kind
    return "other"
