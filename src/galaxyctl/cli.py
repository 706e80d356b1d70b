"""Root CLI group: global flags, settings, and command registration."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click

from galaxyctl import __version__
from galaxyctl.commands import register_commands
from galaxyctl.commands._context import AppContext
from galaxyctl.config.settings import GalaxySettings

# (option declarations..., help) for the boolean flags that map 1:1 onto
# GalaxySettings fields.
_FLAGS: tuple[tuple[str, ...], ...] = (
    ("--json", "json_output", "Print results as JSON."),
    ("-q", "--quiet", "Print only the essential value (a link, layer names)."),
    ("-v", "--verbose", "Show debug logs and per-phase timing."),
    ("--log-json", "Write logs to stderr as JSON lines."),
    ("--sync", "Deliver layer notifications before the command returns."),
)


def _settings_flags(func: Callable[..., Any]) -> Callable[..., Any]:
    for *decls, help_text in reversed(_FLAGS):
        func = click.option(*decls, is_flag=True, help=help_text)(func)
    return func


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="galaxyctl")
@_settings_flags
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Use this galaxyctl.toml instead of searching for one.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, **flags: bool) -> None:
    """galaxyctl: per-user layer registry.

    Every user owns a namespace of uniquely named layers, each bound once
    to a content link. Anyone can resolve anyone's layers.
    """
    app = AppContext(GalaxySettings.from_cli(config_path=config_path, **flags))
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
