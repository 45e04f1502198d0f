"""Environment-driven configuration for the upload service and the web UI."""

from __future__ import annotations

import logging
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


HOST = os.environ.get("SHEET_INSIGHTS_HOST", "0.0.0.0")
PORT = _env_int("SHEET_INSIGHTS_PORT", _env_int("PORT", 5050))
API_BASE = os.environ.get("SHEET_INSIGHTS_API_BASE", f"http://localhost:{PORT}").rstrip("/")
MAX_UPLOAD_MB = _env_int("SHEET_INSIGHTS_MAX_UPLOAD_MB", 100)
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
