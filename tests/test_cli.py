from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient
from cli.config import CLIConfig, load_config


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.weather_calls: List[tuple[str, Optional[str], Optional[str]]] = []
        self.audit_calls: List[Dict[str, Any]] = []
        self.reading_payload: Dict[str, Any] = {
            "city": "Madrid",
            "temperature": {"value": 21.4, "unit": "C"},
            "condition": "Clear",
            "wind": {"speed": 11.3, "unit": "kmh"},
        }
        self.audit_payload: List[Dict[str, Any]] = [
            {
                "record_id": "rec-2",
                "city": "Madrid",
                "source": "accuweather",
                "timestamp": "2024-01-01T00:00:01Z",
                "outcome": "failure",
                "reading": None,
                "error_kind": "unknown_source",
            },
            {
                "record_id": "rec-1",
                "city": "Madrid",
                "source": "mock",
                "timestamp": "2024-01-01T00:00:00Z",
                "outcome": "success",
                "reading": self.reading_payload,
                "error_kind": None,
            },
        ]
        self.closed = False

    def get_weather(self, city: str, source: Optional[str] = None, config: Optional[str] = None) -> Dict[str, Any]:
        self.weather_calls.append((city, source, config))
        return self.reading_payload

    def list_audit(self, **filters: Any) -> List[Dict[str, Any]]:
        self.audit_calls.append(filters)
        return self.audit_payload

    def list_providers(self) -> Dict[str, Any]:
        return {"sources": ["mock", "openweather"], "default": "mock"}

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    stub = StubClient(config=None)

    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return stub


def test_weather_command_renders_reading(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["weather", "Madrid"])

    assert result.exit_code == 0
    assert "Weather for Madrid" in result.stdout
    assert "temperature: 21.4 C" in result.stdout
    assert "wind: 11.3 kmh" in result.stdout
    assert stub.weather_calls == [("Madrid", None, None)]
    assert stub.closed is True


def test_weather_command_passes_source_and_config(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(
        app,
        ["--base-url", "http://gateway.test/", "weather", "Madrid", "-s", "openweather", "-c", '{"apiKey": "X"}'],
    )

    assert result.exit_code == 0
    assert stub.weather_calls == [("Madrid", "openweather", '{"apiKey": "X"}')]
    assert stub.config.base_url == "http://gateway.test"


def test_audit_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["audit", "--city", "Madrid", "--limit", "5"])

    assert result.exit_code == 0
    assert "Audit Records" in result.stdout
    assert "error=unknown_source" in result.stdout
    assert "temperature=21.4 C" in result.stdout
    assert stub.audit_calls == [{"city": "Madrid", "source": None, "outcome": None, "limit": 5}]


def test_providers_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["providers"])

    assert result.exit_code == 0
    assert "mock (default)" in result.stdout
    assert "openweather" in result.stdout


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://env.test/")
    monkeypatch.setenv("CLI_REQUEST_TIMEOUT", "not-a-number")

    config = load_config()

    assert config == CLIConfig(base_url="http://env.test", timeout=15.0)


def test_api_client_reports_http_errors(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/weather/New York"
        return httpx.Response(
            400,
            json={"detail": {"error": "unknown_source", "message": "Unknown weather source 'x'."}},
        )

    client = ApiClient(CLIConfig(base_url="http://gateway.test"))
    client.close()
    client._client = httpx.Client(  # type: ignore[attr-defined]
        base_url="http://gateway.test", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(typer.Exit):
        client.get_weather("New York", source="x")

    assert "unknown_source: Unknown weather source 'x'." in capsys.readouterr().err
    client.close()


def test_serve_command_runs_uvicorn(monkeypatch, runner: CliRunner, stub: StubClient) -> None:
    calls: List[tuple[str, Dict[str, Any]]] = []
    monkeypatch.setattr("cli.app.uvicorn.run", lambda target, **kwargs: calls.append((target, kwargs)))

    result = runner.invoke(app, ["serve", "--port", "9000"])

    assert result.exit_code == 0
    assert calls == [("app.main:app", {"host": "127.0.0.1", "port": 9000, "reload": False})]


@pytest.mark.parametrize("city", ["", "  "])
def test_api_client_sends_blank_city_as_query(capsys, city: str) -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            400,
            json={"detail": {"error": "invalid_city", "message": "City must not be blank."}},
        )

    client = ApiClient(CLIConfig(base_url="http://gateway.test"))
    client.close()
    client._client = httpx.Client(  # type: ignore[attr-defined]
        base_url="http://gateway.test", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(typer.Exit):
        client.get_weather(city, source="mock")

    assert seen[0].url.path == "/api/weather"
    assert seen[0].url.params["city"] == city
    assert "invalid_city: City must not be blank." in capsys.readouterr().err
    client.close()
