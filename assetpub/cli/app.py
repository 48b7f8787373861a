from __future__ import annotations

import typer

from assetpub import __version__
from assetpub.cli.commands.publish import fetch, publish, resolve, upload


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command()(publish)
app.command()(resolve)
app.command()(fetch)
app.command()(upload)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """Upload a CI run's artifacts to a GitHub release."""


def main() -> None:
    app()
