"""
Application state container.

One ``AppState`` owns the session store, the Output Log and the connectivity
flag. It is passed by reference to every component that reads or mutates them.
"""

from dataclasses import dataclass, field

from smia.output_log import OutputLog
from smia.session.store import SessionStore


@dataclass
class AppState:
    session: SessionStore = field(default_factory=SessionStore)
    log: OutputLog = field(default_factory=OutputLog)
    connected: bool = False
