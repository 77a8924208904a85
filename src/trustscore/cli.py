"""CLI entry point for trustscore."""

import asyncio
import json
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv
load_dotenv()

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from trustscore.analyzers.orchestrator import passes_ingest_gate
from trustscore.analyzers.pipeline import RatingPipeline
from trustscore.calculators.ramp_up import readme_score
from trustscore.config import Settings
from trustscore.log import configure_logging
from trustscore.output import OUTPUT_FIELDS

app = typer.Typer(help="Repository trust scoring tool.")

console = Console(stderr=True)


def load_settings() -> Settings:
    """Read settings from the environment and set up logging.

    Raises:
        typer.Exit: If the environment holds invalid settings.
    """
    try:
        settings = Settings.from_env()
    except ValidationError as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    configure_logging(settings.log_level, settings.log_file)
    return settings


def read_url_file(path: Path) -> list[str]:
    """Read one URL per line, skipping blank lines."""
    return [line.strip() for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


@app.command()
def rate(
    urls: list[str] | None = typer.Argument(None, help="GitHub or npmjs.com URLs to rate"),
    file: Path | None = typer.Option(None, "--file", "-f", help="File with one URL per line"),
    summary: bool = typer.Option(False, "--summary", "-s", help="Print a summary table to stderr"),
) -> None:
    """Rate repositories and print one NDJSON record per URL."""
    targets = list(urls or [])
    if file is not None:
        targets.extend(read_url_file(file))
    if not targets:
        console.print("[red]No URLs given[/red]")
        raise typer.Exit(1)

    settings = load_settings()
    records = asyncio.run(_rate(targets, settings))

    for record, _ in records:
        typer.echo(record, nl=False)

    if summary:
        _print_summary(records, settings.ingest_threshold)


async def _rate(urls: list[str], settings: Settings) -> list[tuple[str, float]]:
    """Async implementation of rate."""
    results = []
    async with RatingPipeline(settings) as pipeline:
        for url in urls:
            results.append(await pipeline.rate(url))
    return results


def _print_summary(records: list[tuple[str, float]], threshold: float) -> None:
    table = Table(title="Trust Scores")
    table.add_column("URL", style="cyan")
    for field in OUTPUT_FIELDS[1:]:
        if not field.endswith("_Latency"):
            table.add_column(field, justify="right")
    table.add_column("Ingest", justify="center")

    for record, net_score in records:
        data = json.loads(record)
        values = [
            f"{data[field]:.3f}"
            for field in OUTPUT_FIELDS[1:]
            if not field.endswith("_Latency")
        ]
        verdict = "[green]accept[/green]" if passes_ingest_gate(net_score, threshold) else "[red]reject[/red]"
        table.add_row(escape(data["URL"]), *values, verdict)

    console.print(table)


@app.command()
def gate(
    url: str = typer.Argument(..., help="GitHub or npmjs.com URL to rate"),
    threshold: float | None = typer.Option(None, "--threshold", "-t", help="Minimum net score to accept"),
) -> None:
    """Rate one URL and exit 0 if it passes the ingestion threshold, else 1."""
    settings = load_settings()
    threshold = settings.ingest_threshold if threshold is None else threshold

    record, net_score = asyncio.run(_rate([url], settings))[0]
    typer.echo(record, nl=False)

    if passes_ingest_gate(net_score, threshold):
        console.print(f"[green]Accepted[/green] net score {net_score:.3f} >= {threshold}")
        return
    console.print(f"[red]Rejected[/red] net score {net_score:.3f} < {threshold}")
    raise typer.Exit(1)


@app.command()
def readability(
    path: Path = typer.Argument(..., help="Markdown file to score", exists=True, dir_okay=False),
) -> None:
    """Print the reading ease and ramp-up score of a markdown file."""
    load_settings()
    ease, score = readme_score(path)
    console.print(f"[bold]Flesch reading ease:[/bold] {ease}")
    console.print(f"[bold]Ramp-up score:[/bold] {score:.3f}")


@app.command()
def version() -> None:
    """Show version information."""
    from trustscore import __version__

    console.print(f"trustscore v{__version__}")


if __name__ == "__main__":
    app()
