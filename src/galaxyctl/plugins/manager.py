"""Listener registry for layer-creation notifications.

Listeners come from packages that advertise a ``galaxyctl.plugins`` entry
point, plus the built-in event log the Registry adds itself. Every
listener implements at least one hook from
:class:`~galaxyctl.plugins.hookspecs.GalaxyctlHookSpec`.
"""

from __future__ import annotations

import inspect
import logging
from importlib.metadata import entry_points

import pluggy

from galaxyctl.plugins.hookspecs import HOOK_NAMES, PROJECT_NAME, GalaxyctlHookSpec

ENTRY_POINT_GROUP = "galaxyctl.plugins"

logger = logging.getLogger(__name__)


def implements_hooks(listener: object) -> bool:
    """Whether *listener* carries a ``@hookimpl`` for any galaxyctl hook."""
    marker = f"{PROJECT_NAME}_impl"
    return any(
        getattr(getattr(listener, hook, None), marker, None) is not None for hook in HOOK_NAMES
    )


class PluginManager:
    """Thin wrapper over a pluggy manager bound to the galaxyctl hooks."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(GalaxyctlHookSpec)

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def add_listener(self, listener: object, name: str | None = None) -> str:
        """Register *listener* and return the name it was registered under.

        Raises:
            ValueError: If *listener* implements no galaxyctl hook.
        """
        resolved = name or type(listener).__name__
        if not implements_hooks(listener):
            msg = f"{resolved} implements no galaxyctl hooks"
            raise ValueError(msg)
        self._pm.register(listener, name=resolved)
        logger.debug("Listener registered: %s", resolved)
        return resolved

    def remove_listener(self, name: str) -> None:
        self._pm.unregister(name=name)

    def names(self) -> list[str]:
        return [name for name, _ in self._pm.list_name_plugin()]

    def load_entry_points(self) -> list[str]:
        """Register every installed ``galaxyctl.plugins`` listener.

        An entry point may name a listener instance or a class, which is
        instantiated with no arguments. One that fails to load is logged
        and skipped. Returns the names registered by this call.
        """
        added: list[str] = []
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            if self._pm.has_plugin(ep.name):
                continue
            try:
                target = ep.load()
                listener = target() if inspect.isclass(target) else target
                added.append(self.add_listener(listener, name=ep.name))
            except Exception:
                logger.warning("Skipping plugin %s", ep.name, exc_info=True)
        return added
