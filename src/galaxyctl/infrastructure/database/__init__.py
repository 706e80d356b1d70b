"""SQLite database engine and schema via SQLAlchemy Core."""

from galaxyctl.infrastructure.database.engine import create_db_engine, init_database
from galaxyctl.infrastructure.database.schema import (
    event_wal,
    layer_links,
    metadata,
    user_layers,
)

__all__ = [
    "create_db_engine",
    "event_wal",
    "init_database",
    "layer_links",
    "metadata",
    "user_layers",
]
