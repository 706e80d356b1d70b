"""AppContext — the object every subcommand receives via ``@click.pass_obj``.

It holds the resolved settings, opens the Registry on first use, defers
working out who the caller is until a write needs it, and turns a
ServiceResult into output plus an exit status.
"""

from __future__ import annotations

import functools
import getpass
from typing import TYPE_CHECKING

import click

from galaxyctl.config.logging import configure_logging
from galaxyctl.domain.identity import DeferredIdentity, StaticIdentity
from galaxyctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from galaxyctl.config.settings import GalaxySettings
    from galaxyctl.domain.identity import IdentitySource
    from galaxyctl.infrastructure.registry import Registry
    from galaxyctl.services.result import ServiceResult


def identity_from_settings(settings: GalaxySettings) -> StaticIdentity:
    """The caller named by ``[identity] user``, else the OS login name.

    Raises:
        click.ClickException: If neither yields a usable user.
    """
    user = settings.identity.user
    if user is None:
        try:
            user = getpass.getuser()
        except (KeyError, OSError) as exc:
            msg = "No caller identity: set [identity] user or GALAXYCTL_IDENTITY__USER"
            raise click.ClickException(msg) from exc
    try:
        return StaticIdentity(user)
    except ValueError as exc:
        msg = f"Invalid [identity] user {user!r}: {exc}"
        raise click.ClickException(msg) from exc


class AppContext:
    """Per-invocation state shared by all subcommands."""

    def __init__(self, settings: GalaxySettings) -> None:
        self.settings = settings
        self.output = OutputSettings(
            json_output=settings.json_output,
            quiet=settings.quiet,
            verbose=settings.verbose,
        )
        self.identity: IdentitySource = DeferredIdentity(
            functools.partial(identity_from_settings, settings)
        )
        self._registry: Registry | None = None

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            registry_name=settings.registry.name,
        )
        if settings.verbose:
            from galaxyctl.services.timing import enable_timing

            enable_timing()

    @property
    def registry(self) -> Registry:
        """The registry, opened on first access so ``--help`` never touches the DB."""
        if self._registry is None:
            from galaxyctl.infrastructure.registry import Registry

            self._registry = Registry(self.settings)
            self._registry.init_event_bus(sync=self.settings.sync)
        return self._registry

    def close(self) -> None:
        """Flush in-flight notifications and release the registry."""
        if self._registry is not None:
            self._registry.close()
            self._registry = None

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; a failure goes to stderr and exits with status 1.

        Outside JSON mode, warnings on a success are echoed to stderr so
        piped stdout carries only the result.
        """
        text = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)

        click.echo(text)
        if self.output.json_output:
            return
        for warning in result.warnings:
            click.echo(f"WARNING: {warning}", err=True)
