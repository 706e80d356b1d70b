"""SQLAlchemy Core table definitions for the galaxyctl database.

The registry keeps two keyed maps in lockstep:

- ``user_layers``: one row per user holding the whole ordered layer list
  as a JSON array. Writes replace the list in full.
- ``layer_links``: the ``(user, layer_name) -> ipfs_link`` binding table.

``event_wal`` backs the plugin event bus.
"""

from __future__ import annotations

from sqlalchemy import Column, Index, Integer, MetaData, PrimaryKeyConstraint, Table, Text

metadata = MetaData()

user_layers = Table(
    "user_layers",
    metadata,
    Column("user", Text, primary_key=True),
    Column("layers", Text, nullable=False),  # JSON array, insertion order
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

layer_links = Table(
    "layer_links",
    metadata,
    Column("user", Text, nullable=False),
    Column("layer_name", Text, nullable=False),
    Column("ipfs_link", Text, nullable=False),
    Column("created", Text, nullable=False),
    PrimaryKeyConstraint("user", "layer_name"),
)

event_wal = Table(
    "event_wal",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hook_name", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON
    Column("status", Text, nullable=False),
    Column("error", Text),
    Column("retries", Integer, default=0, server_default="0"),
    Column("created", Text, nullable=False),
    Column("completed", Text),
)

Index("ix_event_wal_status", event_wal.c.status)
