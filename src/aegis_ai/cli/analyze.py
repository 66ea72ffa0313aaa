"""``aegis-ai analyze``: run the analysis pipeline on a local checkout."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..exceptions import AegisError
from ..logging_config import setup_logging
from ..models import AnalysisResult
from ..pipeline import AnalysisPipeline
from ..reporting import compliance_score
from . import app
from ._common import SEVERITY_STYLES, console, resolve_config


def _findings_table(result: AnalysisResult) -> Table:
    table = Table(title="Security findings", show_lines=False)
    table.add_column("ID", style="dim")
    table.add_column("Severity")
    table.add_column("Title")
    table.add_column("Location")
    table.add_column("Confidence", justify="right")
    for finding in result.findings:
        style = SEVERITY_STYLES.get(finding.severity.value, "")
        location = finding.file_path if finding.has_location else "-"
        if finding.has_location and finding.line_number:
            location = f"{location}:{finding.line_number}"
        table.add_row(
            finding.id,
            f"[{style}]{finding.severity.value}[/{style}]",
            finding.title,
            location,
            f"{finding.confidence:.0%}",
        )
    return table


def _fixes_table(result: AnalysisResult) -> Table:
    table = Table(title="Auto-fixes")
    table.add_column("#", justify="right")
    table.add_column("Finding", style="dim")
    table.add_column("Strategy")
    table.add_column("Original")
    table.add_column("Fixed", style="green")
    for index, fix in enumerate(result.auto_fixes):
        table.add_row(str(index), fix.finding_id, fix.strategy, fix.original, fix.fixed)
    return table


def _print_report(result: AnalysisResult) -> None:
    summary = result.summary
    console.print(
        f"[bold]{summary.total_critical}[/bold] critical, "
        f"[bold]{summary.total_high}[/bold] high, "
        f"[bold]{summary.total_medium}[/bold] medium "
        f"- compliance score [bold]{compliance_score(result)}/100[/bold]"
    )
    if summary.business_type:
        console.print(f"[dim]Business type:[/dim] {summary.business_type}")
    if summary.compliance:
        console.print(f"[dim]Compliance:[/dim] {', '.join(summary.compliance)}")
    if result.is_fallback:
        console.print("[yellow]Model output could not be parsed; showing raw response.[/yellow]")

    if result.findings:
        console.print(_findings_table(result))
    else:
        console.print("[green]No findings reported.[/green]")
    if result.auto_fixes:
        console.print(_fixes_table(result))


@app.command()
def analyze(
    path: Path = typer.Argument(
        Path("."), exists=True, file_okay=False, dir_okay=True, resolve_path=True,
        help="Local repository checkout to analyze",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    max_files: Optional[int] = typer.Option(None, "--max-files", help="Maximum files to sample"),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only log errors"),
) -> None:
    """Analyze a local checkout and print findings and auto-fixes."""
    setup_logging(verbose=verbose, quiet=quiet or json_output)

    try:
        settings = resolve_config(config=config, max_files=max_files, verbose=verbose, quiet=quiet)
    except AegisError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2)

    if not settings.has_provider:
        console.print(
            "[red]No AI provider configured.[/red] Set GROQ_API_KEY or OPENROUTER_API_KEY."
        )
        raise typer.Exit(2)

    pipeline = AnalysisPipeline.from_config(settings)
    try:
        if json_output:
            result = pipeline.run(path)
        else:
            with console.status(f"[cyan]Analyzing {path}..."):
                result = pipeline.run(path)
    except AegisError as e:
        console.print(f"[red]Analysis failed:[/red] {e}")
        raise typer.Exit(1)
    finally:
        pipeline.close()

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _print_report(result)
