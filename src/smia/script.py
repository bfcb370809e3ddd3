"""
SMIA script files.

A script is plain text with one command per line. Blank lines and lines
starting with ``#`` are ignored; there is no escaping or continuation syntax.
"""

from pathlib import Path

from smia.config import CONFIG
from smia.logger import get_logger

logger = get_logger(__name__)

COMMENT_PREFIX = "#"


class ScriptFileError(ValueError):
    """Raised when a script file cannot be accepted."""


def is_comment(line: str) -> bool:
    return line.strip().startswith(COMMENT_PREFIX)


def parse_script(text: str) -> list[str]:
    """Return the trimmed command lines of ``text`` in execution order."""
    commands = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            continue
        commands.append(stripped)
    return commands


def load_script(path: str | Path) -> str:
    """
    Read a ``.smia`` script file.

    Raises:
        ScriptFileError: Wrong extension, missing file, or unreadable content.
    """
    path = Path(path)
    if path.suffix.lower() != CONFIG.SCRIPT_EXTENSION:
        raise ScriptFileError(
            f"Solo se permiten archivos con extensión {CONFIG.SCRIPT_EXTENSION}"
        )

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ScriptFileError(f"Archivo no encontrado: {path}")
    except (OSError, UnicodeDecodeError) as e:
        raise ScriptFileError(f"Error al leer el archivo: {e}")

    logger.debug(f"Loaded script {path} ({len(text)} bytes)")
    return text
