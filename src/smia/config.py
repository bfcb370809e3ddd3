# src/smia/config.py

import os

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


class Config:
    # Application Configuration
    SCRIPT_EXTENSION = ".smia"
    DEFAULT_BACKEND_URL = "http://localhost:8080"

    # Script execution
    DEFAULT_THROTTLE_MS = 300
    DEFAULT_HTTP_TIMEOUT = 30.0

    def __init__(self):
        self.backend_url = os.getenv("SMIA_BACKEND_URL", self.DEFAULT_BACKEND_URL)
        self.throttle_ms = _env_int("SMIA_THROTTLE_MS", self.DEFAULT_THROTTLE_MS)
        self.http_timeout = _env_float("SMIA_HTTP_TIMEOUT", self.DEFAULT_HTTP_TIMEOUT)
        self.log_level = os.getenv("SMIA_LOG_LEVEL", "WARNING")

    @property
    def throttle_seconds(self) -> float:
        return max(self.throttle_ms, 0) / 1000.0


CONFIG = Config()
