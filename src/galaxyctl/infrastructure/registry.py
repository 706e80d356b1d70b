"""Registry — the persistent store behind the layer registry.

The Registry is the single dependency injected into every service. It
owns the database engine and the plugin event bus, and hands out two
kinds of connection scopes:

- :meth:`Registry.transaction` for writes. Opens with ``BEGIN IMMEDIATE``
  so the read-check-write of a layer list runs under the SQLite write
  lock, which serializes writers across processes.
- :meth:`Registry.read` for lookups against the committed snapshot.

:meth:`Registry.user_lock` serializes writers for the same user inside
one process, ahead of the database lock.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sqlalchemy import insert, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from galaxyctl.infrastructure.database.engine import init_database
from galaxyctl.infrastructure.database.schema import layer_links, user_layers

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from galaxyctl.config.settings import GalaxySettings
    from galaxyctl.plugins.event_bus import EventBus

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# RegistryTransaction — yielded to callers within transaction() / read()
# ---------------------------------------------------------------------------


@dataclass
class RegistryTransaction:
    """Get/put access to the two keyed maps over one connection."""

    conn: Connection

    def get_layers(self, user: str) -> list[str] | None:
        """Return *user*'s layer list, or None if the user has never written."""
        raw = self.conn.execute(
            select(user_layers.c.layers).where(user_layers.c.user == user)
        ).scalar_one_or_none()
        if raw is None:
            return None
        return list(json.loads(raw))

    def put_layers(self, user: str, layers: list[str], now: str) -> None:
        """Replace *user*'s whole layer list with *layers*."""
        encoded = json.dumps(layers)
        stmt = sqlite_insert(user_layers).values(
            user=user,
            layers=encoded,
            created=now,
            modified=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[user_layers.c.user],
            set_={"layers": encoded, "modified": now},
        )
        self.conn.execute(stmt)

    def insert_link(self, user: str, layer_name: str, ipfs_link: str, now: str) -> None:
        """Bind ``(user, layer_name)`` to *ipfs_link*.

        Raises ``sqlalchemy.exc.IntegrityError`` if the binding exists.
        """
        self.conn.execute(
            insert(layer_links).values(
                user=user,
                layer_name=layer_name,
                ipfs_link=ipfs_link,
                created=now,
            )
        )

    def get_link(self, user: str, layer_name: str) -> str | None:
        """Return the link bound to ``(user, layer_name)``, or None."""
        return self.conn.execute(
            select(layer_links.c.ipfs_link).where(
                layer_links.c.user == user,
                layer_links.c.layer_name == layer_name,
            )
        ).scalar_one_or_none()


@dataclass
class _UserLock:
    """A per-user write lock and the number of threads holding or awaiting it."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


# ---------------------------------------------------------------------------
# Registry — the store
# ---------------------------------------------------------------------------


class Registry:
    """Store encapsulating database access and event dispatch.

    Constructed once at CLI startup from :class:`GalaxySettings` and held
    by the CLI's AppContext. Services receive the Registry via their
    :class:`BaseService` constructor.
    """

    def __init__(self, settings: GalaxySettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(self.root)
        self._event_bus: EventBus | None = None
        self._locks: dict[str, _UserLock] = {}
        self._locks_guard = threading.Lock()

    @property
    def root(self) -> Path:
        """The registry root directory."""
        return self._settings.root

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> GalaxySettings:
        """The resolved settings for this registry."""
        return self._settings

    @property
    def event_bus(self) -> EventBus | None:
        """The plugin event bus (None if not initialized)."""
        return self._event_bus

    def init_event_bus(self, *, sync: bool = False) -> None:
        """Initialize the plugin event bus.

        Creates a PluginManager, loads entry-point listeners,
        registers the built-in event log plugin when enabled, and wires
        up the EventBus. No-op when ``[events] enabled = false``.
        """
        from galaxyctl.plugins.builtins.event_log import EventLogPlugin
        from galaxyctl.plugins.event_bus import EventBus
        from galaxyctl.plugins.manager import PluginManager

        config = self._settings.events
        if not config.enabled:
            return

        pm = PluginManager()
        pm.load_entry_points()
        if config.log_events:
            pm.add_listener(EventLogPlugin(), name="event-log")

        self._event_bus = EventBus(
            self._engine,
            pm,
            sync=sync,
            max_retries=config.max_retries,
            max_workers=config.max_workers,
        )

    @contextmanager
    def user_lock(self, user: str) -> Iterator[None]:
        """Hold the in-process write lock for *user*'s namespace.

        The lock entry is dropped once its last holder or waiter leaves.
        """
        with self._locks_guard:
            entry = self._locks.get(user)
            if entry is None:
                entry = self._locks[user] = _UserLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[user]

    @contextmanager
    def transaction(self) -> Iterator[RegistryTransaction]:
        """Write transaction holding the SQLite write lock from the start.

        Commits when the block exits normally and rolls back on any
        exception, so the layer list and link table move together.

        Usage::

            with registry.transaction() as txn:
                layers = txn.get_layers(user) or []
                txn.put_layers(user, [*layers, name], now)
                txn.insert_link(user, name, link, now)
        """
        with self._engine.begin() as conn:
            conn.exec_driver_sql("BEGIN IMMEDIATE")
            yield RegistryTransaction(conn=conn)

    @contextmanager
    def read(self) -> Iterator[RegistryTransaction]:
        """Read-only scope against the committed state."""
        with self._engine.connect() as conn:
            yield RegistryTransaction(conn=conn)

    def close(self) -> None:
        """Flush pending events and release the database engine."""
        if self._event_bus is not None:
            self._event_bus.shutdown()
            self._event_bus = None
        self._engine.dispose()
