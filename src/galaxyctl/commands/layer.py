"""Command group: register, resolve, and list layers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from galaxyctl.commands._base import GalaxyGroup
from galaxyctl.services.layers import LayerService

if TYPE_CHECKING:
    from galaxyctl.commands._context import AppContext


def _non_empty(_ctx: click.Context, _param: click.Parameter, value: str) -> str:
    if not value:
        raise click.BadParameter("must not be empty")
    return value


_LAYER_EXAMPLES = """\
  galaxyctl layer create Layer1 ipfs://bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi
  galaxyctl layer resolve alice Layer1
  galaxyctl layer list
  galaxyctl layer list bob"""


@click.group(cls=GalaxyGroup, examples=_LAYER_EXAMPLES)
@click.pass_obj
def layer(app: AppContext) -> None:
    """Register and resolve named layers."""


@layer.command(
    examples="""\
  galaxyctl layer create Layer1 ipfs://link1
  galaxyctl --json layer create terrain ipfs://bafy.../terrain.json"""
)
@click.argument("layer_name", callback=_non_empty)
@click.argument("ipfs_link")
@click.pass_obj
def create(app: AppContext, layer_name: str, ipfs_link: str) -> None:
    """Create LAYER_NAME in your namespace, bound to IPFS_LINK."""
    svc = LayerService(app.registry, app.identity)
    app.emit(svc.create_layer(layer_name, ipfs_link))


@layer.command(
    examples="""\
  galaxyctl layer resolve alice Layer1
  galaxyctl -q layer resolve alice Layer1 | xargs ipfs cat"""
)
@click.argument("user")
@click.argument("layer_name", callback=_non_empty)
@click.pass_obj
def resolve(app: AppContext, user: str, layer_name: str) -> None:
    """Print the link bound to USER's layer LAYER_NAME."""
    svc = LayerService(app.registry, app.identity)
    app.emit(svc.resolve_link(user, layer_name))


@layer.command(
    "list",
    examples="""\
  galaxyctl layer list
  galaxyctl layer list alice
  galaxyctl --json layer list alice""",
)
@click.argument("user", required=False)
@click.pass_obj
def list_cmd(app: AppContext, user: str | None) -> None:
    """List USER's layers in creation order (default: yourself)."""
    svc = LayerService(app.registry, app.identity)
    app.emit(svc.list_layers(user or app.identity.current_user()))
