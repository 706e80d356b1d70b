"""Tests for the root galaxyctl CLI."""

import json

import pytest
from click.testing import CliRunner

from galaxyctl import __version__
from galaxyctl.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "galaxyctl" in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


@pytest.mark.parametrize("flag", ["--json", "-q", "-v", "--log-json", "--sync"])
def test_global_flags_accepted(cli_runner: CliRunner, flag: str) -> None:
    result = cli_runner.invoke(cli, [flag, "--version"])
    assert result.exit_code == 0


@pytest.mark.usefixtures("_isolated_root")
def test_whoami(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--json", "whoami"])
    assert result.exit_code == 0
    assert json.loads(result.output)["data"] == {"user": "alice"}


@pytest.mark.usefixtures("_isolated_root")
def test_concrete_scenario(cli_runner: CliRunner) -> None:
    ok = cli_runner.invoke(cli, ["--sync", "layer", "create", "Layer1", "ipfs://link1"])
    dup = cli_runner.invoke(cli, ["--sync", "layer", "create", "Layer1", "ipfs://link2"])
    hit = cli_runner.invoke(cli, ["-q", "layer", "resolve", "alice", "Layer1"])
    miss = cli_runner.invoke(cli, ["layer", "resolve", "alice", "Layer2"])

    assert ok.exit_code == 0
    assert dup.exit_code == 1
    assert hit.output.strip() == "ipfs://link1"
    assert miss.exit_code == 1
