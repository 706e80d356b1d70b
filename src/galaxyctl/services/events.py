"""EventService — inspect and drain the notification WAL.

Creation notifications are fire-and-forget from the registry's point of
view. This service lets an operator see what was delivered and retry
what was not.
"""

from __future__ import annotations

import json

from sqlalchemy import select

from galaxyctl.infrastructure.database.schema import event_wal
from galaxyctl.plugins.event_bus import EventStatus
from galaxyctl.services.base import BaseService
from galaxyctl.services.result import ServiceResult
from galaxyctl.services.timing import timed

EVENT_STATUSES = tuple(s.value for s in EventStatus)


class EventService(BaseService):
    """Read and retry entries in the ``event_wal`` table."""

    @timed
    def list_events(self, *, status: str | None = None, limit: int = 50) -> ServiceResult:
        """List WAL entries, newest first, optionally filtered by *status*."""
        stmt = select(event_wal).order_by(event_wal.c.id.desc()).limit(limit)
        if status is not None:
            stmt = stmt.where(event_wal.c.status == status)

        with self._registry.read() as txn:
            rows = txn.conn.execute(stmt).fetchall()

        items = [
            {
                "id": row.id,
                "hook_name": row.hook_name,
                "status": row.status,
                "retries": row.retries,
                "payload": json.loads(row.payload),
                "error": row.error,
                "created": row.created,
            }
            for row in rows
        ]
        return ServiceResult(
            ok=True,
            op="list_events",
            data={"items": items, "count": len(items)},
        )

    @timed
    def drain(self) -> ServiceResult:
        """Retry pending and failed notifications synchronously."""
        bus = self._registry.event_bus
        if bus is None:
            return ServiceResult(
                ok=True,
                op="drain_events",
                data={"items": [], "count": 0},
                warnings=["Event bus not initialized; nothing drained"],
            )

        items = bus.drain()
        return ServiceResult(
            ok=True,
            op="drain_events",
            data={"items": items, "count": len(items)},
        )
