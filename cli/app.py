from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer
import uvicorn

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_audit, render_providers, render_reading


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for querying the weather gateway service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Gateway base URL (defaults to API_BASE_URL env or http://localhost:8080).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP response.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("weather")
def weather_command(
    ctx: typer.Context,
    city: str = typer.Argument(..., help="City to look up."),
    source: Optional[str] = typer.Option(
        None,
        "--source",
        "-s",
        help="Provider name (mock or openweather). Defaults to mock.",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help='Provider configuration as JSON, e.g. \'{"apiKey": "..."}\'.',
    ),
) -> None:
    """Fetch the current weather for a city."""
    state = _get_state(ctx)
    payload = state.client.get_weather(city, source=source, config=config)
    render_reading(payload)


@app.command("audit")
def audit_command(
    ctx: typer.Context,
    city: Optional[str] = typer.Option(None, "--city", help="Only records for this city."),
    source: Optional[str] = typer.Option(None, "--source", help="Only records for this source."),
    outcome: Optional[str] = typer.Option(None, "--outcome", help="success or failure."),
    limit: int = typer.Option(20, "--limit", min=1, help="Maximum records to show."),
) -> None:
    """List recent audit records, newest first."""
    state = _get_state(ctx)
    records = state.client.list_audit(city=city, source=source, outcome=outcome, limit=limit)
    render_audit(records)


@app.command("providers")
def providers_command(ctx: typer.Context) -> None:
    """List the weather sources the gateway accepts."""
    state = _get_state(ctx)
    render_providers(state.client.list_providers())


@app.command("serve")
def serve_command(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8080, "--port", help="Port to listen on."),
    reload: bool = typer.Option(False, "--reload/--no-reload", help="Restart on code changes."),
) -> None:
    """Run the gateway HTTP service."""
    uvicorn.run("app.main:app", host=host, port=port, reload=reload)
