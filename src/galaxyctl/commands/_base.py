"""Click classes whose commands carry an ``examples`` block.

``--examples`` prints the block and exits; ``--help`` stays short and
only points at it.
"""

from __future__ import annotations

from typing import Any

import click

_HINT = "Run with --examples for usage examples."


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    examples = getattr(ctx.command, "examples", None) or ""
    click.echo(f"Examples for '{ctx.command_path}':\n\n{examples}")
    ctx.exit(0)


class _WithExamples:
    """Mixin for click.Command subclasses: ``examples=`` kwarg plus the flag."""

    examples: str | None

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if not examples:
            return
        params: list[click.Parameter] = self.params  # type: ignore[attr-defined]
        params.append(
            click.Option(
                ["--examples"],
                is_flag=True,
                expose_value=False,
                is_eager=True,
                callback=_print_examples,
                help="Show usage examples and exit.",
            )
        )
        epilog = self.epilog  # type: ignore[attr-defined]
        self.epilog = f"{epilog}\n\n{_HINT}" if epilog else _HINT  # type: ignore[attr-defined]


class GalaxyCommand(_WithExamples, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class GalaxyGroup(_WithExamples, click.Group):
    """Group whose subcommands are :class:`GalaxyCommand` by default."""

    command_class = GalaxyCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)
