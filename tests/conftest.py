"""Shared pytest fixtures and test helpers for galaxyctl tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from galaxyctl.config.settings import GalaxySettings
from galaxyctl.domain.identity import StaticIdentity
from galaxyctl.infrastructure.database.engine import init_database
from galaxyctl.infrastructure.registry import Registry
from galaxyctl.services.layers import LayerService

CALLER = "alice"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep GALAXYCTL_* variables from the outer shell out of tests."""
    for name in ("GALAXYCTL_CONFIG", "GALAXYCTL_IDENTITY__USER", "GALAXYCTL_ROOT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Engine:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def registry(tmp_path: Path) -> Registry:
    """Registry on a temp directory, without an event bus."""
    settings = GalaxySettings.from_cli(root=tmp_path)
    r = Registry(settings)
    try:
        yield r
    finally:
        r.close()


@pytest.fixture
def identity() -> StaticIdentity:
    return StaticIdentity(CALLER)


@pytest.fixture
def layer_service(registry: Registry, identity: StaticIdentity) -> LayerService:
    return LayerService(registry, identity)


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run CLI tests from a temp registry root as user ``alice``.

    Use via ``@pytest.mark.usefixtures("_isolated_root")``.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GALAXYCTL_IDENTITY__USER", CALLER)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def create_layer_as(
    registry: Registry, user: str, layer_name: str, ipfs_link: str
) -> dict[str, Any]:
    """Create a layer in *user*'s namespace, asserting success."""
    result = LayerService(registry, StaticIdentity(user)).create_layer(layer_name, ipfs_link)
    assert result.ok, result.error
    return result.data
