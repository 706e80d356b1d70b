"""Output mode selection for ServiceResult.

The CLI renders results for humans (Rich), scripts (``--quiet``), or
machines (``--json``). JSON wins over quiet when both are set.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from galaxyctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from galaxyctl.services.result import ServiceResult


class OutputSettings(BaseModel):
    """Output flags extracted from GalaxySettings."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult according to *settings*."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
