"""Subcommand modules for galaxyctl.

register_commands() defers imports so ``galaxyctl --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register command groups and standalone commands on the root group."""
    from galaxyctl.commands.events import events
    from galaxyctl.commands.layer import layer
    from galaxyctl.commands.whoami import whoami

    cli.add_command(layer)
    cli.add_command(events)
    cli.add_command(whoami)
