"""BaseService — what every galaxyctl service is built on.

A service gets the :class:`Registry` at construction and opens its own
``transaction()`` / ``read()`` scopes on it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from galaxyctl.infrastructure.registry import Registry

logger = logging.getLogger(__name__)


class BaseService:
    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def _notify(self, hook_name: str, payload: dict[str, Any]) -> list[str]:
        """Queue a notification for a write that has already committed.

        Returns the warnings to put on the caller's result. A bus failure
        never turns a committed write into an error.
        """
        bus = self._registry.event_bus
        if bus is None:
            return []
        try:
            bus.dispatch(hook_name, payload)
        except Exception:
            logger.debug("Notification %s not queued", hook_name, exc_info=True)
            return [f"Notification {hook_name} could not be queued"]
        return []
