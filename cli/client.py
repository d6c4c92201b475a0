from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import typer

from cli.config import CLIConfig

_CONTENT_TYPES = {
    ".csv": "text/csv",
    ".json": "application/json",
    ".geojson": "application/geo+json",
}


class ApiClient:
    """Minimal HTTP client for the hazard service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def upload_file(self, path: Path, hazard_type: Optional[str] = None) -> Dict[str, Any]:
        if not path.is_file():
            raise typer.BadParameter(f"Path {path} is not a file.")

        content_type = _CONTENT_TYPES.get(path.suffix.lower(), "application/octet-stream")
        try:
            with path.open("rb") as handle:
                response = self._client.post(
                    "/readings/upload",
                    params=self._type_params(hazard_type),
                    files={"file": (path.name, handle, content_type)},
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def load_sample(self, hazard_type: Optional[str] = None) -> Dict[str, Any]:
        try:
            response = self._client.post(
                "/readings/sample", params=self._type_params(hazard_type)
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def get_dashboard(self, hazard_type: str) -> Dict[str, Any]:
        try:
            response = self._client.get(f"/readings/{hazard_type}")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def clear(self, hazard_type: str) -> Dict[str, Any]:
        try:
            response = self._client.delete(f"/readings/{hazard_type}")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def generate_report(self, hazard_type: str, statistics: Dict[str, Any]) -> str:
        try:
            response = self._client.post(
                "/reports", json={"type": hazard_type, "statistics": statistics}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        html = response.json().get("html_content")
        if not isinstance(html, str):
            raise typer.BadParameter("Unexpected response payload when generating report.")
        return html

    @staticmethod
    def _type_params(hazard_type: Optional[str]) -> Dict[str, str]:
        return {"type": hazard_type} if hazard_type else {}

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: Any = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except ValueError:
            detail = exc.response.text.strip()
        if isinstance(detail, dict):
            detail = detail.get("message")
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
