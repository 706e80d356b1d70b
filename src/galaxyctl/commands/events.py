"""Command group: inspect and drain layer notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from galaxyctl.commands._base import GalaxyGroup
from galaxyctl.services.events import EVENT_STATUSES, EventService

if TYPE_CHECKING:
    from galaxyctl.commands._context import AppContext

_EVENTS_EXAMPLES = """\
  galaxyctl events list
  galaxyctl events list --status failed
  galaxyctl events drain"""


@click.group(cls=GalaxyGroup, examples=_EVENTS_EXAMPLES)
@click.pass_obj
def events(app: AppContext) -> None:
    """Inspect the layer notification log."""


@events.command(
    "list",
    examples="""\
  galaxyctl events list --limit 10
  galaxyctl -v events list --status dead_letter""",
)
@click.option("--status", type=click.Choice(EVENT_STATUSES), default=None, help="Filter by status.")
@click.option("--limit", default=50, type=click.IntRange(min=1), help="Max entries.")
@click.pass_obj
def list_cmd(app: AppContext, status: str | None, limit: int) -> None:
    """List recent notifications, newest first."""
    app.emit(EventService(app.registry).list_events(status=status, limit=limit))


@events.command(examples="  galaxyctl events drain")
@click.pass_obj
def drain(app: AppContext) -> None:
    """Retry pending and failed notifications now."""
    app.emit(EventService(app.registry).drain())
