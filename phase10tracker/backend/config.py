"""Runtime settings read from ``PHASE10_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


ENV_PREFIX = "PHASE10_"
DEFAULT_STORAGE_FILE = "phase10-storage.json"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Phase10Settings:
    database_url: str | None
    storage_path: Path | None
    host: str
    port: int
    log_level: str


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def load_settings() -> Phase10Settings:
    """Build settings from the environment.

    An empty ``PHASE10_STORAGE_PATH`` disables the JSON file and keeps
    snapshots in memory. Invalid ports and log levels raise ``ValueError``.
    """
    port_raw = _env("PORT", "8000")
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}PORT must be an integer, got {port_raw!r}") from exc

    log_level = (_env("LOG_LEVEL") or "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"{ENV_PREFIX}LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    storage_raw = _env("STORAGE_PATH", DEFAULT_STORAGE_FILE)
    return Phase10Settings(
        database_url=_env("DATABASE_URL") or None,
        storage_path=Path(storage_raw) if storage_raw else None,
        host=_env("HOST", "127.0.0.1"),
        port=port,
        log_level=log_level,
    )
