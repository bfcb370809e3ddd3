"""
Command classification for SMIA scripts.

Decides, from the verb of a raw command line, whether the command touches
protected filesystem state and therefore needs an authenticated session.
"""

# Verb -> requires an authenticated session.
AUTH_POLICY: dict[str, bool] = {
    # Groups and users
    "mkgrp": True,
    "rmgrp": True,
    "mkusr": True,
    "rmusr": True,
    "chgrp": False,
    # Directories and files
    "mkdir": True,
    "mkfile": True,
    "remove": True,
    "edit": True,
    "rename": True,
    "copy": True,
    "move": True,
    "find": True,
    "chown": True,
    "chmod": True,
    "cat": True,
    # Recovery / loss simulation
    "recovery": True,
    "loss": True,
    # Disks, partitions, mounting
    "mkdisk": False,
    "rmdisk": False,
    "fdisk": False,
    "mount": False,
    "unmount": False,
    "mounted": False,
    "mkfs": False,
    "rep": False,
    "journaling": False,
    # Session
    "login": False,
    "logout": False,
}

LOGIN_VERB = "login"
LOGOUT_VERB = "logout"


def command_verb(line: str) -> str:
    """Return the lower-cased first token of a command line ("" if blank)."""
    parts = line.strip().lower().split()
    return parts[0] if parts else ""


def requires_auth(line: str) -> bool:
    """Check whether a command line needs an authenticated session."""
    return AUTH_POLICY.get(command_verb(line), False)


def is_login(line: str) -> bool:
    return command_verb(line) == LOGIN_VERB


def is_logout(line: str) -> bool:
    return command_verb(line) == LOGOUT_VERB


def parse_flags(line: str) -> dict[str, str]:
    """
    Extract ``-name=value`` flags from a command line.

    Flag names are lower-cased; surrounding double quotes are stripped from
    values. Tokens without ``=`` are recorded with an empty value.
    """
    flags: dict[str, str] = {}
    for token in line.strip().split()[1:]:
        if not token.startswith("-"):
            continue
        name, _, value = token.lstrip("-").partition("=")
        if not name:
            continue
        flags[name.lower()] = value.strip('"')
    return flags
