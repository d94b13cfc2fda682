from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the weather gateway."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def get_weather(
        self,
        city: str,
        source: Optional[str] = None,
        config: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, str] = {}
        if source is not None:
            params["source"] = source
        if config is not None:
            params["config"] = config
        if not city.strip():
            params["city"] = city
            return self._get("/api/weather", params)
        return self._get(f"/api/weather/{quote(city, safe='')}", params)

    def list_audit(
        self,
        city: Optional[str] = None,
        source: Optional[str] = None,
        outcome: Optional[str] = None,
        limit: int = 20,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"limit": limit}
        if city:
            params["city"] = city
        if source:
            params["source"] = source
        if outcome:
            params["outcome"] = outcome
        payload = self._get("/api/audit", params)
        records = payload.get("records")
        if not isinstance(records, list):
            raise typer.BadParameter("Unexpected response payload when listing audit records.")
        return records

    def list_providers(self) -> Dict[str, Any]:
        return self._get("/api/providers", {})

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: Any = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        if isinstance(detail, dict):
            detail = f"{detail.get('error')}: {detail.get('message')}"
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
