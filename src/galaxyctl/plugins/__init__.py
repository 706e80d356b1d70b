"""Extension layer — notification sink via pluggy.

Listeners are discovered through the ``galaxyctl.plugins`` entry point.
INVARIANT: Plugin failures are warnings, never errors.
"""

from galaxyctl.plugins.event_bus import EventBus
from galaxyctl.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
