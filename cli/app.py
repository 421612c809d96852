from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import NoReturn, Optional

import typer

from app.schemas import BatchDecodeResponse, ReadingOut
from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_batch, render_reading
from logging_config import configure_logging
from models.address import Address, InvalidAddress
from services.aggregator import ReadingAggregator
from services.batch import BatchDecoder, BatchStatus
from services.decoder import DecodeError, decode
from services.frames import InvalidFrame, parse_hex_frame, parse_timestamp
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Decode full and cut sensor advertisement payloads.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        _fail("CLI state is uninitialized.")
    return state


def _captured_at(value: Optional[str]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--captured-at") from exc


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Decoder API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the decoder API to respond.",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging()
    config = load_config(base_url=base_url, request_timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("decode")
def decode_command(
    payload: str = typer.Argument(..., help="Hex encoded manufacturer data."),
    captured_at: Optional[str] = typer.Option(
        None, "--captured-at", help="ISO-8601 capture time (defaults to now)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the reading as JSON."),
) -> None:
    """Decode a single payload locally."""
    timestamp = _captured_at(captured_at)
    try:
        reading = decode(parse_hex_frame(payload), timestamp)
    except (InvalidFrame, DecodeError) as exc:
        _fail(f"Could not decode payload: {exc}")

    output = ReadingOut.from_reading(reading)
    if as_json:
        typer.echo(output.model_dump_json(indent=2))
        return
    render_reading(output.model_dump(mode="json"))


@app.command("decode-file")
def decode_file_command(
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="File with one hex frame per line."
    ),
    captured_at: Optional[str] = typer.Option(
        None, "--captured-at", help="ISO-8601 capture time applied to every frame."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the batch result as JSON."),
) -> None:
    """Decode every frame in a file, reporting failures per line."""
    timestamp = _captured_at(captured_at)
    batch_decoder = BatchDecoder(
        aggregator=ReadingAggregator(), workers=get_settings().decoder_workers
    )
    try:
        with file.open("r", encoding="utf-8") as handle:
            result = batch_decoder.decode_lines(handle, timestamp)
    except UnicodeDecodeError as exc:
        _fail(f"{file} is not a UTF-8 text file: {exc.reason} at byte {exc.start}")
    finally:
        batch_decoder.shutdown()

    output = BatchDecodeResponse.from_result(result)
    if as_json:
        typer.echo(output.model_dump_json(indent=2))
    else:
        render_batch(output.model_dump(mode="json"))
    if result.status is BatchStatus.failed:
        raise typer.Exit(code=1)


@app.command("remote")
def remote_command(
    ctx: typer.Context,
    payload: str = typer.Argument(..., help="Hex encoded manufacturer data."),
    captured_at: Optional[str] = typer.Option(
        None, "--captured-at", help="ISO-8601 capture time (defaults to server time)."
    ),
) -> None:
    """Decode a payload through the decoder API."""
    state = _get_state(ctx)
    timestamp = _captured_at(captured_at) if captured_at is not None else None
    typer.echo(f"Decoding via {state.config.base_url} ...")
    render_reading(state.client.decode(payload, captured_at=timestamp))


@app.command("address")
def address_command(
    text: str = typer.Argument(..., help="Address such as CB:B8:33:4C:88:4F."),
) -> None:
    """Print the canonical form of an address."""
    try:
        address = Address.from_text(text)
    except InvalidAddress as exc:
        _fail(str(exc))
    typer.echo(address.to_text())
