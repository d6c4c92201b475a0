from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_dashboard, render_ingestion
from models.records import HazardType


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the hazard heatmap service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Request timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("ingest")
def ingest_command(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="CSV, JSON or GeoJSON file."
    ),
    hazard_type: Optional[HazardType] = typer.Option(
        None, "--type", "-t", help="Batch hazard type for rows without their own."
    ),
) -> None:
    """Upload a file of readings for validation and storage."""
    state = _get_state(ctx)
    typer.echo(f"Uploading {file} to {state.config.base_url} ...")
    payload = state.client.upload_file(file, hazard_type.value if hazard_type else None)
    typer.secho("Data uploaded successfully.", fg=typer.colors.GREEN)
    render_ingestion(payload)


@app.command("sample")
def sample_command(
    ctx: typer.Context,
    hazard_type: Optional[HazardType] = typer.Option(None, "--type", "-t"),
) -> None:
    """Generate and ingest a synthetic batch around the configured sites."""
    state = _get_state(ctx)
    payload = state.client.load_sample(hazard_type.value if hazard_type else None)
    typer.secho("Sample data loaded.", fg=typer.colors.GREEN)
    render_ingestion(payload)


@app.command("stats")
def stats_command(
    ctx: typer.Context,
    hazard_type: HazardType = typer.Option(HazardType.gas, "--type", "-t"),
) -> None:
    """Show overall and per-site statistics for stored readings."""
    state = _get_state(ctx)
    render_dashboard(state.client.get_dashboard(hazard_type.value))


@app.command("clear")
def clear_command(
    ctx: typer.Context,
    hazard_type: HazardType = typer.Option(HazardType.gas, "--type", "-t"),
) -> None:
    """Delete every stored reading of one type."""
    state = _get_state(ctx)
    payload = state.client.clear(hazard_type.value)
    typer.secho(
        f"Deleted {payload.get('deleted', 0)} {hazard_type.value} readings.",
        fg=typer.colors.GREEN,
    )


@app.command("report")
def report_command(
    ctx: typer.Context,
    hazard_type: HazardType = typer.Option(HazardType.gas, "--type", "-t"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", dir_okay=False, help="Where to write the HTML report."
    ),
) -> None:
    """Render an HTML report from the current statistics of one type."""
    state = _get_state(ctx)
    dashboard = state.client.get_dashboard(hazard_type.value)
    html = state.client.generate_report(hazard_type.value, dashboard.get("statistics") or {})
    target = output or Path(f"hazard-report-{hazard_type.value}.html")
    target.write_text(html, encoding="utf-8")
    typer.secho(f"Report written to {target}", fg=typer.colors.GREEN)
