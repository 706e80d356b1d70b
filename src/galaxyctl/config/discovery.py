"""Locate ``galaxyctl.toml`` and the registry root it defines.

The config file marks a registry the way ``.git`` marks a repository:
the nearest one at or above the working directory wins, and its
directory is where ``.galaxyctl/`` lives. ``GALAXYCTL_CONFIG`` pins a
specific file instead.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "galaxyctl.toml"
CONFIG_ENV_VAR = "GALAXYCTL_CONFIG"


def _search_path(start: Path) -> Iterator[Path]:
    here = start.resolve()
    for directory in (here, *here.parents):
        yield directory / CONFIG_FILENAME


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), if any.

    A ``GALAXYCTL_CONFIG`` that names a missing file yields None rather
    than falling back to the walk-up search.
    """
    pinned = os.environ.get(CONFIG_ENV_VAR)
    if pinned:
        path = Path(pinned)
        return path if path.is_file() else None
    return next((p for p in _search_path(start or Path.cwd()) if p.is_file()), None)


def registry_root(config: Path | None, start: Path | None = None) -> Path:
    """Directory holding the registry state for *config*.

    Without a config file the registry lives in *start* (default: cwd).
    """
    if config is not None:
        return config.parent
    return start or Path.cwd()
