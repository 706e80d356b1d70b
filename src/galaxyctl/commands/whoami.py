"""Standalone command: show the caller identity used for writes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from galaxyctl.commands._base import GalaxyCommand
from galaxyctl.services.layers import LayerService

if TYPE_CHECKING:
    from galaxyctl.commands._context import AppContext


@click.command(cls=GalaxyCommand, examples="  galaxyctl whoami\n  galaxyctl -q whoami")
@click.pass_obj
def whoami(app: AppContext) -> None:
    """Show which user new layers are created under."""
    app.emit(LayerService(app.registry, app.identity).whoami())
