"""Database engine setup for SQLite with WAL mode.

The DB is stored at {root}/.galaxyctl/galaxyctl.db. WAL mode lets
readers run against a committed snapshot while a writer holds the lock.

SQLAlchemy Core (not ORM) is used: the registry is two keyed maps and
an event log, with no object graph worth mapping.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from galaxyctl.infrastructure.database.schema import metadata

STATE_DIRNAME = ".galaxyctl"
DB_FILENAME = "galaxyctl.db"


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode enabled."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def init_database(root: Path) -> Engine:
    """Initialize the registry database under ``{root}/.galaxyctl/``.

    Creates the state directory and all tables from :data:`schema.metadata`.

    Idempotent — safe to call on an existing registry.
    """
    state_dir = root / STATE_DIRNAME
    state_dir.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(state_dir / DB_FILENAME)
    metadata.create_all(engine)
    return engine
