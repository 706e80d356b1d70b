"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, galaxyctl.toml only contains
overrides. An empty file is a valid config.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class RegistryConfig(BaseModel):
    """[registry] section."""

    model_config = {"frozen": True}

    name: str = "galaxy"


class IdentityConfig(BaseModel):
    """[identity] section.

    ``user`` is the caller identity for writes. None means the OS login
    name of the process owner.
    """

    model_config = {"frozen": True}

    user: str | None = None


class EventsConfig(BaseModel):
    """[events] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    log_events: bool = True
    max_retries: int = Field(default=3, ge=1)
    max_workers: int = Field(default=2, ge=1)
