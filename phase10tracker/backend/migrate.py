"""Create the PostgreSQL table that holds store snapshots."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import load_settings


SCHEMA_FILE = Path(__file__).with_name("db_schema.sql")

logger = logging.getLogger(__name__)


def apply_schema(database_url: str) -> None:
    import psycopg

    schema_sql = SCHEMA_FILE.read_text(encoding="utf-8")
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(schema_sql)
        conn.commit()
    logger.info("Applied %s", SCHEMA_FILE.name)


def main(database_url: str | None = None) -> None:
    """Apply the schema to ``database_url``, falling back to ``PHASE10_DATABASE_URL``."""
    target = database_url or load_settings().database_url
    if not target:
        raise RuntimeError("A database URL is required: pass --database-url or set PHASE10_DATABASE_URL")
    apply_schema(target)


if __name__ == "__main__":
    main()
