"""
ContractScope CLI - frontend/backend API contract analysis
Main entry point for the command-line interface

Usage:
    contractscope analyze extracted.yaml                 # Contracts table
    contractscope analyze extracted.yaml -f sarif -o contracts.sarif
    contractscope match extracted.yaml GET /api/users/42 # Debug one URL
    contractscope version
"""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from contractscope import __version__
from contractscope.contracts.analyzer import analyze_contracts, summarize_mismatches
from contractscope.contracts.loader import dump_result, load_analysis_input
from contractscope.contracts.matcher import PathMatcher
from contractscope.contracts.models import AnalysisResult
from contractscope.contracts.report import SarifReportGenerator
from contractscope.shared.domain.exceptions import ContractScopeError
from contractscope.shared.infrastructure.logging import configure_logging, get_logger

app = typer.Typer(
    name="contractscope",
    help="ContractScope - find mismatches between frontend API calls and backend endpoints",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
logger = get_logger(__name__)

OUTPUT_FORMATS = ("table", "json", "yaml", "sarif")

# Exit codes
EXIT_FAILURE = 1
EXIT_MISMATCH_ERRORS = 2


@app.callback()
def _setup() -> None:
    configure_logging(stream=sys.stderr)


@app.command()
def version():
    """Show ContractScope version information"""
    console.print(Panel.fit(
        "[bold cyan]ContractScope[/bold cyan]\n"
        f"[dim]Version:[/dim] {__version__}\n",
        title="About ContractScope",
        border_style="cyan"
    ))


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="JSON/YAML file with extracted endpoints and calls"),
    format: str = typer.Option("table", "--format", "-f", help="Output format (table, json, yaml, sarif)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the report to this file"),
    fail_on_error: bool = typer.Option(
        False, "--fail-on-error", help="Exit with code 2 when any error-severity mismatch is found"
    ),
):
    """
    Analyze contracts between backend endpoints and frontend calls

    Example:
        contractscope analyze extracted.yaml
        contractscope analyze extracted.json -f json -o result.json
        contractscope analyze extracted.yaml -f sarif -o contracts.sarif --fail-on-error
    """
    fmt = format.lower()
    if fmt not in OUTPUT_FORMATS:
        console.print(f"[red]Error: Unknown format '{format}'. Use one of: {', '.join(OUTPUT_FORMATS)}[/red]")
        raise typer.Exit(code=EXIT_FAILURE)

    try:
        result = analyze_contracts(load_analysis_input(input_file))

        if fmt == "table":
            _print_result(result)
            if output:
                output.write_text(dump_result(result, "json"), encoding="utf-8")
        else:
            text = _render(result, fmt)
            if output:
                output.parent.mkdir(parents=True, exist_ok=True)
                output.write_text(text, encoding="utf-8")
                console.print(f"[green]Report written to {output}[/green]")
            else:
                typer.echo(text)
    except ContractScopeError as e:
        logger.error("analyze_failed", error=str(e), context=e.context)
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=EXIT_FAILURE)
    except OSError as e:
        console.print(f"[red]Error: Cannot write {output}: {escape(str(e))}[/red]")
        raise typer.Exit(code=EXIT_FAILURE)

    if fail_on_error and result.has_errors():
        raise typer.Exit(code=EXIT_MISMATCH_ERRORS)


@app.command()
def match(
    input_file: Path = typer.Argument(..., help="JSON/YAML file with extracted endpoints"),
    method: str = typer.Argument(..., help="HTTP method of the call (ANY if unknown)"),
    url: str = typer.Argument(..., help="URL or URL template called by the frontend"),
    show_all: bool = typer.Option(False, "--all", help="Show every compatible endpoint, not just the best"),
):
    """
    Show which backend endpoint a frontend URL resolves to

    Example:
        contractscope match extracted.yaml GET /api/users/42
        contractscope match extracted.yaml ANY /api/users/42 --all
    """
    try:
        analysis_input = load_analysis_input(input_file)
    except ContractScopeError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=EXIT_FAILURE)

    matcher = PathMatcher()
    for ep in analysis_input.endpoints:
        matcher.add_endpoint(ep.method, ep.path)

    if show_all:
        matches = matcher.match_all(method, url)
    else:
        best = matcher.match(method, url)
        matches = [best] if best is not None else []

    if not matches:
        console.print(f"[yellow]No endpoint matches {method.upper()} {url}[/yellow]")
        raise typer.Exit(code=EXIT_FAILURE)

    table = Table(title=f"Matches for {method.upper()} {url}", box=box.ROUNDED)
    table.add_column("Method", style="cyan", no_wrap=True)
    table.add_column("Endpoint", style="green")
    table.add_column("Confidence", style="yellow")
    table.add_column("Params", style="dim")

    for m in matches:
        params = ", ".join(f"{k}={v}" for k, v in m.path_params.items())
        table.add_row(m.endpoint_method, m.endpoint_path, f"{m.confidence:.2f}", params or "-")

    console.print(table)


def _render(result: AnalysisResult, fmt: str) -> str:
    if fmt == "sarif":
        generator = SarifReportGenerator()
        return generator.to_json(generator.generate(result))
    return dump_result(result, fmt)


def _print_result(result: AnalysisResult) -> None:
    table = Table(title="Contracts", box=box.ROUNDED)
    table.add_column("Method", style="cyan", no_wrap=True)
    table.add_column("Endpoint", style="green")
    table.add_column("Calls", justify="right")
    table.add_column("Errors", justify="right", style="red")
    table.add_column("Warnings", justify="right", style="yellow")
    table.add_column("Confidence", justify="right")
    table.add_column("Health", justify="right")

    for c in result.contracts:
        table.add_row(
            c.method,
            c.endpoint,
            str(c.frontend_call_count()),
            str(c.error_count()),
            str(c.warning_count()),
            f"{c.confidence:.2f}",
            f"{c.health:.2f}",
        )
    console.print(table)

    for c in result.contracts:
        if not c.mismatches:
            continue
        console.print(f"\n[bold]{c.method} {c.endpoint}[/bold]")
        for m, summary in zip(c.mismatches, summarize_mismatches(c.mismatches)):
            color = "red" if m.severity.value == "error" else "yellow"
            console.print(f"  [{color}]{m.severity.value}[/{color}] {escape(summary)}", highlight=False)

    if result.unmatched_backend:
        console.print("\n[bold]Unused backend endpoints[/bold]")
        for ep in result.unmatched_backend:
            console.print(f"  {ep.method} {ep.path} [dim]{ep.file}:{ep.line}[/dim]")

    if result.unmatched_frontend:
        console.print("\n[bold]Unresolved frontend calls[/bold]")
        for call in result.unmatched_frontend:
            console.print(f"  {call.method or 'ANY'} {call.url} [dim]{call.file}:{call.line}[/dim]")

    console.print(Panel(result.summary(), title="Summary", border_style="cyan"))


def main():
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()
