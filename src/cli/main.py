"""RDI Quote CLI.

Runs the API server or a single address check from the terminal.

Usage:
    rdiquote serve                     Start the API server
    rdiquote check "1 Main St Apt 2" --city Austin --state TX --zip 78701
    rdiquote quote "500 Commerce Blvd" --city Austin --state TX --zip 78701
    rdiquote config show               Print resolved config (secrets masked)
"""

import asyncio
import json
from typing import Optional

import typer

from src.cli.output import console, format_classification, format_quote
from src.config import AppConfig, load_config
from src.services.models import RequestContext
from src.services.notification_router import NotificationRouter
from src.services.notification_sink import SlackWebhookSink
from src.services.pipeline import AddressCheckPipeline, PipelineOutcome
from src.services.verification_client import VerificationClient
from src.utils.redaction import redact_for_logging

app = typer.Typer(
    name="rdiquote",
    help="Residential delivery classification and rate quotes",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Configuration management")
app.add_typer(config_app, name="config")

# --- Global state ---
_config_path: str | None = None


@app.callback()
def main(
    config: Optional[str] = typer.Option(
        None, "--config", help="Path to rdiquote.yaml config file"
    ),
):
    """RDI Quote CLI."""
    global _config_path
    _config_path = config


def _load() -> AppConfig:
    try:
        return load_config(config_path=_config_path)
    except FileNotFoundError as e:
        console.print(f"[red]Config file not found:[/red] {e}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Config validation failed:[/red] {e}")
        raise typer.Exit(1)


async def _run_pipeline(cfg: AppConfig, mode: str, body: dict) -> PipelineOutcome:
    """Run one request through the same stack the server uses."""
    verifier = VerificationClient(cfg.provider)
    sink = SlackWebhookSink(cfg.notifications)
    router = NotificationRouter(sink, cfg.notifications)
    pipeline = AddressCheckPipeline(verifier, router)
    try:
        if mode == "quote":
            return await pipeline.run_quote(body, RequestContext())
        return await pipeline.run_classification(body, RequestContext())
    finally:
        await router.drain()
        await verifier.aclose()
        await sink.aclose()


def _address_body(street: str, city: str, state: str, zip_code: str, country: str) -> dict:
    return {
        "address1": street,
        "city": city,
        "state": state,
        "zip": zip_code,
        "country": country,
    }


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port"),
):
    """Start the API server."""
    import uvicorn

    from src.api.main import create_app

    cfg = _load()
    final_host = host or cfg.server.host
    final_port = port or cfg.server.port
    console.print(f"[bold]Starting RDI Quote on {final_host}:{final_port}[/bold]")
    uvicorn.run(
        create_app(cfg),
        host=final_host,
        port=final_port,
        log_level=cfg.server.log_level,
    )


@app.command()
def check(
    street: str = typer.Argument(..., help="Street line (address1)"),
    city: str = typer.Option(..., "--city"),
    state: str = typer.Option(..., "--state"),
    zip_code: str = typer.Option(..., "--zip"),
    country: str = typer.Option("US", "--country"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Classify one address as residential or commercial."""
    cfg = _load()
    body = _address_body(street, city, state, zip_code, country)
    outcome = asyncio.run(_run_pipeline(cfg, "classification", body))
    console.print(format_classification(outcome, as_json=as_json))
    if outcome.status_code != 200:
        raise typer.Exit(1)


@app.command()
def quote(
    street: str = typer.Argument(..., help="Street line (address1)"),
    city: str = typer.Option(..., "--city"),
    state: str = typer.Option(..., "--state"),
    zip_code: str = typer.Option(..., "--zip"),
    country: str = typer.Option("US", "--country"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Quote the standard rate for one destination."""
    cfg = _load()
    body = {"to_address": _address_body(street, city, state, zip_code, country)}
    outcome = asyncio.run(_run_pipeline(cfg, "quote", body))
    console.print(format_quote(outcome, as_json=as_json))


@config_app.command("show")
def config_show():
    """Display resolved configuration (secrets masked)."""
    cfg = _load()
    console.print_json(json.dumps(redact_for_logging(cfg.model_dump(mode="json"))))
