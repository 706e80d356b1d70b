"""Resolved configuration for one galaxyctl invocation.

Sources, highest priority first:

1. CLI flags handed to :meth:`GalaxySettings.from_cli`
2. ``GALAXYCTL_*`` environment variables (``__`` descends into a section,
   e.g. ``GALAXYCTL_IDENTITY__USER``)
3. the registry's ``galaxyctl.toml``
4. defaults on the section models
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    TomlConfigSettingsSource,
)

from galaxyctl.config.discovery import find_config, registry_root
from galaxyctl.config.models import EventsConfig, IdentityConfig, RegistryConfig

# Config file being loaded by the from_cli call in progress.
_loading: ContextVar[Path | None] = ContextVar("galaxyctl_loading_config", default=None)


class GalaxySettings(BaseSettings):
    """Settings shared by the CLI, the Registry and the services.

    Attributes:
        root: Registry directory. The database lives in ``root/.galaxyctl/``.
        config_path: The ``galaxyctl.toml`` that was read, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "GALAXYCTL_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    sync: bool = False

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_file = _loading.get()
        if toml_file is None:
            return (init_settings, env_settings)
        return (init_settings, env_settings, TomlConfigSettingsSource(settings_cls, toml_file))

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> GalaxySettings:
        """Build settings for a CLI run.

        ``--config`` names the file outright; otherwise it is discovered
        from *root* (or the cwd). Unless *root* is given, the registry
        lives next to the config file.

        Raises:
            click.ClickException: If the config file is not valid TOML.
        """
        if config_path:
            toml_file = Path(config_path) if Path(config_path).is_file() else None
        else:
            toml_file = find_config(root)

        token = _loading.set(toml_file)
        try:
            return cls(
                root=root or registry_root(toml_file),
                config_path=toml_file,
                **cli_flags,
            )
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {toml_file}: {exc}"
            raise click.ClickException(msg) from exc
        finally:
            _loading.reset(token)
