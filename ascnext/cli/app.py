from __future__ import annotations

import typer

from ascnext import __version__
from ascnext.cli.commands.next_cmd import next_version


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command("next")(next_version)


def _version_callback(value: bool) -> None:
    # Eager, so it runs before click insists on a subcommand.
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        is_eager=True,
        callback=_version_callback,
        help="Show version and exit.",
    ),
) -> None:
    pass


def main() -> None:
    app()
