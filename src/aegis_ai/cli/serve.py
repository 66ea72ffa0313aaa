"""``aegis-ai serve``: webhook and analysis API server."""

import logging
from pathlib import Path
from typing import Optional

import typer

from ..exceptions import AegisError
from ..logging_config import setup_logging
from . import app
from ._common import console, resolve_config

logger = logging.getLogger(__name__)


@app.command()
def serve(
    port: int = typer.Option(8080, help="Port to listen on"),
    host: str = typer.Option("127.0.0.1", help="Host to bind to"),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    workers: Optional[int] = typer.Option(None, "-w", "--workers", help="Background analysis workers"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also append logs to this file"),
) -> None:
    """Start the HTTP service that accepts webhooks and analysis requests."""
    try:
        from ..server import _check_deps

        _check_deps()
    except ImportError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    import uvicorn

    from ..jobs import Orchestrator
    from ..server.app import create_app

    setup_logging(verbose=verbose, log_file=str(log_file) if log_file else None)
    try:
        settings = resolve_config(config=config, workers=workers, verbose=verbose)
    except AegisError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2)

    if not settings.has_provider:
        console.print(
            "[yellow]No AI provider configured; every analysis will fail until "
            "GROQ_API_KEY or OPENROUTER_API_KEY is set.[/yellow]"
        )
    if not settings.github_token:
        logger.info("GITHUB_TOKEN not set; pull request comments will only be logged")

    orchestrator = Orchestrator.from_config(settings)
    url = f"http://{host}:{port}"
    console.print(f"[bold]Aegis AI[/bold] listening on [link={url}]{url}[/link]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    try:
        uvicorn.run(
            create_app(orchestrator),
            host=host,
            port=port,
            log_level="info" if verbose else "warning",
        )
    except KeyboardInterrupt:
        pass
    finally:
        orchestrator.shutdown(wait=False)
        console.print("\n[dim]Stopped.[/dim]")
