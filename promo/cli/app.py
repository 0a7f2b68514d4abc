from __future__ import annotations

import typer

from promo import __version__
from promo.cli.commands.inspect_cmd import gate, tag
from promo.cli.commands.run_cmd import run


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(run)
app.command()(gate)
app.command()(tag)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Promote approved release and hotfix branches."""


def main() -> None:
    app()
