"""Human and quiet renderings of a ServiceResult.

Human output is a headline (``OK op`` or ``ERROR op — message``) followed
by an op-specific body, drawn with Rich into a StringIO console. Quiet
output is the one value a script wants: the link, the layer names, the
user.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from galaxyctl.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from galaxyctl.services.result import ServiceResult

    Body = Callable[["Console", dict[str, Any], bool], None]


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* for a terminal."""
    console = create_console()
    _headline(console, result)
    if result.ok:
        _BODIES.get(result.op, _key_values)(console, result.data, verbose)
    else:
        _error_body(console, result, verbose)
    if verbose and result.meta:
        _meta_body(console, result.meta)
    return get_output(console).rstrip("\n")


_QUIET: dict[str, Callable[[dict[str, Any]], str]] = {
    "resolve_link": lambda data: str(data["ipfs_link"]),
    "list_layers": lambda data: "\n".join(data.get("layers", [])),
    "whoami": lambda data: str(data["user"]),
}


def render_quiet(result: ServiceResult) -> str:
    """Render the bare value for ``--quiet``; other successes print ``OK: op``."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    extract = _QUIET.get(result.op)
    return extract(result.data) if extract else f"OK: {result.op}"


# ── Headline and error ────────────────────────────────────────────────


def _headline(console: Console, result: ServiceResult) -> None:
    line = Text()
    if result.ok:
        line.append("OK", style="galaxy.ok")
        line.append(f"  {result.op}", style="galaxy.op")
    else:
        line.append("ERROR", style="galaxy.error")
        line.append(f"  {result.op}", style="galaxy.op")
        line.append(f" — {result.error.message if result.error else 'Unknown error'}")
    console.print(line)


def _error_body(console: Console, result: ServiceResult, verbose: bool) -> None:
    if result.error is None:
        return
    console.print(Text(f"  code: {result.error.code}", style="dim"))
    if verbose:
        for key, value in result.error.detail.items():
            console.print(Text(f"  {key}: {value}", style="dim"))


# ── Bodies ────────────────────────────────────────────────────────────


def _binding(console: Console, data: dict[str, Any], verbose: bool) -> None:
    """``user / layer_name`` over its link, for create_layer and resolve_link."""
    console.print(
        Text.assemble(
            "  ",
            (str(data.get("user", "")), "galaxy.user"),
            " / ",
            (str(data.get("layer_name", "")), "galaxy.layer"),
        )
    )
    console.print(Text.assemble("  → ", (str(data.get("ipfs_link", "")), "galaxy.link")))


def _layer_list(console: Console, data: dict[str, Any], verbose: bool) -> None:
    layers: list[str] = data.get("layers", [])
    console.print(Text.assemble("  user: ", (str(data.get("user", "")), "galaxy.user")))
    console.print(Text(f"  count: {data.get('count', len(layers))}", style="galaxy.key"))
    width = len(str(len(layers)))
    for n, name in enumerate(layers, start=1):
        console.print(Text.assemble(f"  {n:>{width}}. ", (name, "galaxy.layer")))


def _event_table(console: Console, data: dict[str, Any], verbose: bool) -> None:
    items: list[dict[str, Any]] = data.get("items", [])
    console.print(Text(f"  count: {len(items)}", style="galaxy.key"))
    if not items:
        return

    table = Table(show_header=True, pad_edge=False, box=None)
    for column in ("id", "hook", "status", "tries"):
        table.add_column(column, justify="right" if column in ("id", "tries") else "left")
    if verbose:
        table.add_column("error", style="dim")

    for item in items:
        status = str(item.get("status", ""))
        cells: list[str | Text] = [
            str(item.get("id", "")),
            str(item.get("hook_name", "")),
            Text(status, style=style_for_status(status)),
            str(item.get("retries", "")),
        ]
        if verbose:
            cells.append(str(item.get("error") or ""))
        table.add_row(*cells)
    console.print(table)


def _key_values(console: Console, data: dict[str, Any], verbose: bool) -> None:
    for key, value in data.items():
        console.print(Text.assemble((f"  {key}: ", "galaxy.key"), str(value)))


def _meta_body(console: Console, meta: dict[str, Any]) -> None:
    console.print()
    for key, value in meta.items():
        if key != "timing":
            console.print(Text(f"  {key}: {value}", style="dim"))
            continue
        total = float(value.get("total_ms", 0.0))
        console.print(Text(f"  {value.get('op', '?')}: {total:.2f}ms", style=_slow(total)))
        for name, ms in value.get("phases", {}).items():
            console.print(Text(f"    {name:<10}{ms:>8.2f}ms", style=_slow(ms)))


def _slow(ms: float) -> str:
    return "yellow" if ms > 100 else "dim"


_BODIES: dict[str, Body] = {
    "create_layer": _binding,
    "resolve_link": _binding,
    "list_layers": _layer_list,
    "list_events": _event_table,
    "drain_events": _event_table,
}
