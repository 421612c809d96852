from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

_UNITS = {
    "temperature": "°C",
    "humidity": "%",
    "pressure": "Pa",
    "acceleration_x": "mg",
    "acceleration_y": "mg",
    "acceleration_z": "mg",
    "battery_voltage": "V",
    "transmit_power": "dBm",
    "movement_counter": "",
    "sequence_number": "",
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def format_measurement(name: str, measurement: Dict[str, Any]) -> str:
    value = measurement.get("value")
    if value is None:
        return "not in layout"
    if not measurement.get("valid"):
        return "invalid"
    if isinstance(value, float):
        value = round(value, 3)
    unit = _UNITS.get(name, "")
    return f"{value} {unit}".rstrip()


def render_reading(payload: Dict[str, Any]) -> None:
    echo_heading("Reading")
    tag = payload.get("format_tag")
    echo_key_values(
        [
            ("address", payload.get("address")),
            ("layout", f"{payload.get('layout')} (0x{tag:02x})" if isinstance(tag, int) else None),
            ("captured_at", payload.get("captured_at")),
        ]
    )
    echo_key_values(
        (name, format_measurement(name, payload.get(name) or {})) for name in _UNITS
    )


def render_batch(payload: Dict[str, Any]) -> None:
    echo_heading("Batch Result")
    echo_key_values(
        [
            ("status", payload.get("status")),
            ("decoding_ms", payload.get("decoding_ms")),
        ]
    )

    for reading in payload.get("readings") or []:
        typer.echo()
        render_reading(reading)

    summary = payload.get("summary") or {}
    typer.echo()
    echo_heading("Summary")
    if summary:
        echo_key_values(
            [
                ("reading_count", summary.get("reading_count")),
                ("min_temperature", summary.get("min_temperature")),
                ("max_temperature", summary.get("max_temperature")),
                ("mean_temperature", summary.get("mean_temperature")),
            ]
        )
        per_address = summary.get("per_address_count") or {}
        if per_address:
            typer.echo("per_address_count:")
            for address, count in per_address.items():
                typer.echo(f"  - {address}: {count}")
    else:
        typer.echo("No summary available.")

    errors = payload.get("errors") or []
    typer.echo()
    echo_heading("Errors")
    if errors:
        for error in errors:
            typer.secho(
                f"  - line {error.get('line_number')}: {error.get('reason')}",
                fg=typer.colors.RED,
            )
    else:
        typer.echo("No errors recorded.")
