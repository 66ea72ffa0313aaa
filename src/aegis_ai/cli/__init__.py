"""CLI entry point: registers all subcommands."""

from typing import Optional

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="aegis-ai",
    help="Aegis AI - AI-assisted security analysis and auto-remediation",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"aegis-ai {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """Analyze repositories for security risks and apply generated fixes."""


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .serve import serve as _serve  # noqa: F401, E402
