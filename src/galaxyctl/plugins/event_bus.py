"""Layer notifications: write-ahead in ``event_wal``, then hand to listeners.

A notification row is committed before any listener sees it, so an
event survives a crash between the registry write and delivery. Each
delivery attempt ends in one status update:

    pending ──ok──▶ completed
       │
       └─error─▶ failed ──(retries == max_retries)──▶ dead_letter

``drain()`` re-attempts everything still pending or failed.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from galaxyctl.infrastructure.database.schema import event_wal
from galaxyctl.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from galaxyctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

_SETTLE_TIMEOUT = 30.0


class EventStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    DEAD_LETTER = "dead_letter"


class EventBus:
    """Deliver registry notifications to plugin listeners.

    Parameters:
        engine: SQLAlchemy engine with the ``event_wal`` table.
        plugin_manager: PluginManager whose hook relay receives events.
        sync: Deliver inline instead of on the worker pool.
        max_retries: Failed attempts before an event becomes ``dead_letter``.
        max_workers: Worker pool size.
    """

    def __init__(
        self,
        engine: Engine,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_retries: int = 3,
        max_workers: int = 2,
    ) -> None:
        self._engine = engine
        self._pm = plugin_manager
        self._max_retries = max_retries
        self._pool = None if sync else ThreadPoolExecutor(max_workers=max_workers)
        self._inflight: list[Future[EventStatus]] = []

    @property
    def plugin_manager(self) -> PluginManager:
        return self._pm

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> int:
        """Queue *payload* for *hook_name* listeners. Returns the WAL row id."""
        event_id = self._append(hook_name, payload)
        if self._pool is None:
            self._attempt(event_id, hook_name, payload)
        else:
            self._inflight.append(self._pool.submit(self._attempt, event_id, hook_name, payload))
        return event_id

    def drain(self) -> list[dict[str, Any]]:
        """Re-attempt every pending or failed event once, oldest first.

        Returns ``{id, hook_name, status}`` per attempted event.
        """
        self._settle()
        attempted: list[dict[str, Any]] = []
        for event_id, hook_name, payload in self._retryable():
            status = self._attempt(event_id, hook_name, payload)
            attempted.append({"id": event_id, "hook_name": hook_name, "status": str(status)})
        return attempted

    def shutdown(self) -> None:
        """Wait for in-flight deliveries and stop the worker pool."""
        self._settle()
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _append(self, hook_name: str, payload: dict[str, Any]) -> int:
        with self._engine.begin() as conn:
            result = conn.execute(
                insert(event_wal).values(
                    hook_name=hook_name,
                    payload=json.dumps(payload),
                    status=EventStatus.PENDING.value,
                    retries=0,
                    created=now_iso(),
                )
            )
        return int(result.inserted_primary_key[0])

    def _retryable(self) -> list[tuple[int, str, dict[str, Any]]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(event_wal.c.id, event_wal.c.hook_name, event_wal.c.payload)
                .where(event_wal.c.status.in_([EventStatus.PENDING, EventStatus.FAILED]))
                .order_by(event_wal.c.id)
            ).fetchall()
        return [(row.id, row.hook_name, json.loads(row.payload)) for row in rows]

    def _attempt(self, event_id: int, hook_name: str, payload: dict[str, Any]) -> EventStatus:
        """Call the listeners once and record the outcome."""
        hook = getattr(self._pm.hook, hook_name, None)
        error: str | None = None
        if hook is None:
            logger.debug("No hookspec for %s; event %d has no listeners", hook_name, event_id)
        else:
            try:
                hook(**payload)
            except Exception as exc:
                logger.warning("Hook %s failed for event %d: %s", hook_name, event_id, exc)
                error = str(exc)
        return self._record(event_id, error)

    def _record(self, event_id: int, error: str | None) -> EventStatus:
        with self._engine.begin() as conn:
            if error is None:
                status = EventStatus.COMPLETED
                values: dict[str, Any] = {"error": None, "completed": now_iso()}
            else:
                retries = 1 + conn.execute(
                    select(event_wal.c.retries).where(event_wal.c.id == event_id)
                ).scalar_one()
                status = (
                    EventStatus.DEAD_LETTER if retries >= self._max_retries else EventStatus.FAILED
                )
                values = {
                    "error": error,
                    "retries": retries,
                    "completed": now_iso() if status is EventStatus.DEAD_LETTER else None,
                }
            conn.execute(
                update(event_wal)
                .where(event_wal.c.id == event_id)
                .values(status=status.value, **values)
            )
        return status

    def _settle(self) -> None:
        """Block until queued deliveries have recorded their outcome."""
        pending, self._inflight = self._inflight, []
        _, not_done = wait(pending, timeout=_SETTLE_TIMEOUT)
        if not_done:
            logger.warning("%d deliveries still running after %.0fs", len(not_done), _SETTLE_TIMEOUT)
        for future in pending:
            if future.done() and future.exception() is not None:
                logger.debug("Delivery task raised", exc_info=future.exception())
