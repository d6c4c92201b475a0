from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_number(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:.2f}"
    return str(value)


def render_statistics(statistics: Dict[str, Any]) -> None:
    echo_key_values(
        [
            ("max", _format_number(statistics.get("max"))),
            ("min", _format_number(statistics.get("min"))),
            ("average", _format_number(statistics.get("average"))),
            ("danger_zone_count", statistics.get("danger_zone_count")),
            ("habitation_distance_km", _format_number(statistics.get("habitation_distance_km"))),
        ]
    )
    bands = statistics.get("band_counts") or {}
    if bands:
        typer.echo("band_counts:")
        for band, count in bands.items():
            typer.echo(f"  - {band}: {count}")


def render_ingestion(payload: Dict[str, Any]) -> None:
    echo_heading("Ingestion Result")
    echo_key_values(
        [
            ("hazard_type", payload.get("hazard_type")),
            ("readings", len(payload.get("readings") or [])),
            ("dropped_count", payload.get("dropped_count")),
        ]
    )
    typer.echo()
    echo_heading("Statistics")
    render_statistics(payload.get("statistics") or {})

    rejected = payload.get("rejected") or []
    if rejected:
        typer.echo()
        echo_heading("Rejected Rows")
        for rejection in rejected:
            typer.echo(f"  - row {rejection.get('index')}: {rejection.get('reason')}")


def render_dashboard(payload: Dict[str, Any]) -> None:
    hazard_type = str(payload.get("hazard_type") or "")
    echo_heading(f"Overall Statistics - {hazard_type.capitalize()}")
    echo_key_values([("readings", len(payload.get("readings") or []))])
    render_statistics(payload.get("statistics") or {})

    sites = payload.get("sites") or []
    if not sites:
        return
    typer.echo()
    echo_heading("Site Results")
    for site in sites:
        typer.echo()
        typer.secho(site.get("site_name", ""), bold=True)
        echo_key_values(
            [
                ("data_points", site.get("point_count")),
                ("max", _format_number(site.get("max"))),
                ("average", _format_number(site.get("average"))),
                ("danger_zones", site.get("danger_zone_count")),
                ("safe_distance_km", _format_number(site.get("habitation_distance_km"))),
            ]
        )
