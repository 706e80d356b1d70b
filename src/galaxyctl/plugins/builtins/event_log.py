"""Built-in plugin: record registry events in the structured log."""

from __future__ import annotations

import structlog

from galaxyctl.plugins.hookspecs import hookimpl

log = structlog.get_logger("galaxyctl.events")


class EventLogPlugin:
    """Logs every ``LayerCreated`` notification at INFO."""

    @hookimpl
    def post_create_layer(self, user: str, layer_name: str, ipfs_link: str) -> None:
        log.info("layer.created", user=user, layer_name=layer_name, ipfs_link=ipfs_link)
