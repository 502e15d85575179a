"""Durable key-value storage for store snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any, Protocol


STORAGE_KEY = "phase10-storage"

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """Raised when a persisted snapshot cannot be turned back into store state."""


class SnapshotStorage(Protocol):
    def read(self, key: str) -> dict[str, Any] | None:
        """Return the document stored under key, or None when nothing is stored."""

    def write(self, key: str, document: dict[str, Any]) -> None:
        """Replace the document stored under key."""


@dataclass
class InMemorySnapshotStorage:
    def __post_init__(self) -> None:
        self._documents: dict[str, str] = {}

    def read(self, key: str) -> dict[str, Any] | None:
        raw = self._documents.get(key)
        if raw is None:
            return None
        return _decode(raw)

    def write(self, key: str, document: dict[str, Any]) -> None:
        self._documents[key] = json.dumps(document)


@dataclass
class JsonFileSnapshotStorage:
    path: Path

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        documents = _decode(self.path.read_text(encoding="utf-8"))
        if not isinstance(documents, dict):
            raise SnapshotError(f"Storage file {self.path} does not contain a JSON object")
        return documents

    def read(self, key: str) -> dict[str, Any] | None:
        return self._read_all().get(key)

    def write(self, key: str, document: dict[str, Any]) -> None:
        documents = self._read_all()
        documents[key] = document
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(documents, handle)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote snapshot %s to %s", key, self.path)


@dataclass
class PostgresSnapshotStorage:
    database_url: str

    def _connect(self) -> Any:
        import psycopg

        return psycopg.connect(self.database_url)

    def read(self, key: str) -> dict[str, Any] | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT state_json FROM snapshots WHERE key = %s", (key,))
                row = cur.fetchone()

        if row is None:
            return None
        (state_json,) = row
        return state_json if isinstance(state_json, dict) else _decode(state_json)

    def write(self, key: str, document: dict[str, Any]) -> None:
        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO snapshots (key, state_json, updated_at)
                    VALUES (%s, %s::jsonb, %s)
                    ON CONFLICT (key) DO UPDATE
                    SET state_json = EXCLUDED.state_json, updated_at = EXCLUDED.updated_at
                    """,
                    (key, json.dumps(document), now),
                )
            conn.commit()


def _decode(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Stored snapshot is not valid JSON: {exc}") from exc


def create_storage(database_url: str | None, storage_path: str | Path | None) -> SnapshotStorage:
    if database_url:
        return PostgresSnapshotStorage(database_url=database_url)
    if storage_path:
        return JsonFileSnapshotStorage(path=Path(storage_path))
    return InMemorySnapshotStorage()
