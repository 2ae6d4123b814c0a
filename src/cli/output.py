"""CLI output formatters for Rich panels and JSON.

Provides human-readable Rich output (default) and machine-parseable JSON
output (--json flag). All formatting goes through these functions so the
CLI commands stay clean.
"""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.services.pipeline import PipelineOutcome

console = Console()


def format_cost(cents: int) -> str:
    """Format cost in cents as a dollar string."""
    return f"${cents / 100:,.2f}"


def _render(renderable: Any) -> str:
    with console.capture() as capture:
        console.print(renderable)
    return capture.get()


def format_classification(outcome: PipelineOutcome, as_json: bool = False) -> str:
    """Format an RDI check outcome as a Rich panel or JSON."""
    if as_json:
        return json.dumps({"status_code": outcome.status_code, **outcome.body}, indent=2)

    body = outcome.body
    if outcome.status_code != 200:
        lines = [f"[bold red]Error {outcome.status_code}:[/bold red] {body.get('error')}"]
        if body.get("details"):
            lines.append(f"[dim]{body['details']}[/dim]")
        return _render(Panel("\n".join(lines), title="RDI Check", border_style="red"))

    kind = "[magenta]residential[/magenta]" if body["residential"] else "[cyan]commercial[/cyan]"
    verified = "[green]yes[/green]" if body["verification"] else "[yellow]no[/yellow]"
    lines = [
        f"[bold]Type:[/bold]      {kind}",
        f"[bold]Verified:[/bold]  {verified}",
        f"[bold]Message:[/bold]   {body['message']}",
    ]
    if outcome.classification is not None:
        lines.append(f"[bold]Source:[/bold]    {outcome.classification.source.value}")
    return _render(Panel("\n".join(lines), title="RDI Check", border_style="cyan"))


def format_quote(outcome: PipelineOutcome, as_json: bool = False) -> str:
    """Format a quote outcome as a Rich table or JSON."""
    if as_json:
        return json.dumps(outcome.body, indent=2)

    table = Table(title="Rates", show_lines=True)
    table.add_column("Service", style="white")
    table.add_column("Code", style="cyan", no_wrap=True)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Description")
    for rate in outcome.body:
        table.add_row(
            rate["service_name"],
            rate["service_code"],
            format_cost(rate["total_price"]),
            rate["description"],
        )
    return _render(table)
