from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_measure(measure: Dict[str, Any] | None, value_key: str) -> str:
    if not measure:
        return "n/a"
    return f"{measure.get(value_key)} {measure.get('unit')}"


def render_reading(payload: Dict[str, Any]) -> None:
    echo_heading(f"Weather for {payload.get('city')}")
    echo_key_values(
        [
            ("temperature", _format_measure(payload.get("temperature"), "value")),
            ("condition", payload.get("condition")),
            ("wind", _format_measure(payload.get("wind"), "speed")),
        ]
    )


def render_audit(records: List[Dict[str, Any]]) -> None:
    echo_heading("Audit Records")
    if not records:
        typer.echo("No audit records found.")
        return
    for record in records:
        line = (
            f"  - {record.get('timestamp')} {record.get('outcome')} "
            f"city={record.get('city')} source={record.get('source')}"
        )
        if record.get("error_kind"):
            line += f" error={record.get('error_kind')}"
        reading = record.get("reading")
        if reading:
            line += (
                f" temperature={_format_measure(reading.get('temperature'), 'value')}"
                f" wind={_format_measure(reading.get('wind'), 'speed')}"
            )
        typer.echo(line)


def render_providers(payload: Dict[str, Any]) -> None:
    echo_heading("Weather Sources")
    default = payload.get("default")
    for name in payload.get("sources") or []:
        suffix = " (default)" if name == default else ""
        typer.echo(f"  - {name}{suffix}")
