"""HTML report rendering for computed hazard statistics."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.schemas import StatisticsPayload
from models.records import HazardType, SeverityBand

_BAND_CSS = {
    SeverityBand.safe: "safe",
    SeverityBand.moderate: "warning",
    SeverityBand.severe: "danger",
}

_environment = Environment(
    loader=FileSystemLoader(str(Path(__file__).resolve().parent / "templates")),
    autoescape=select_autoescape(["html"]),
)


def render_report(
    hazard_type: HazardType,
    statistics: StatisticsPayload,
    generated_at: Optional[datetime] = None,
) -> str:
    timestamp = generated_at or datetime.now(timezone.utc)
    band_rows = [
        (band.value, _BAND_CSS[band], statistics.band_counts.get(band, 0))
        for band in SeverityBand
    ]
    template = _environment.get_template("report.html")
    return template.render(
        hazard_type=hazard_type.value,
        statistics=statistics,
        band_rows=band_rows,
        generated_at=timestamp.strftime("%Y-%m-%d %H:%M:%S %Z").strip(),
    )
