"""CLI principal (Typer).

Por qué una CLI fina:
- Toda la lógica vive en `WitClient`; aquí solo se parsean flags y se
  presentan resultados (Rich).
- Sirve de ejemplo ejecutable de cada operación del cliente.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.text import Text

from witai.cli import doctor
from witai.cli.ui_components import (
    build_entity_panel,
    build_intents_table,
    build_outcomes_table,
    build_turns_table,
)
from witai.core.config import AppSettings
from witai.core.errors import WitError
from witai.core.logger import setup_logging
from witai.core.request_builder import guess_audio_content_type
from witai.core.services.client import WitClient

app = typer.Typer(no_args_is_help=True, help="Command line client for the Wit.ai HTTP API.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


def make_client(settings: AppSettings) -> WitClient:
    return WitClient(settings=settings)


def _parse_context(raw: str | None) -> dict[str, Any] | None:
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"context must be a JSON object: {exc}") from exc
    if not isinstance(data, dict):
        raise typer.BadParameter("context must be a JSON object")
    return data


def _fail(exc: Exception) -> NoReturn:
    _console.print(Text(str(exc), style="red"))
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    settings = AppSettings()
    setup_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


@app.command()
def message(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Text to interpret."),
    context: Optional[str] = typer.Option(None, "--context", help="Context as a JSON object."),
    n: Optional[int] = typer.Option(None, "--n", min=1, help="Maximum number of outcomes."),
    raw: bool = typer.Option(False, "--raw", help="Print the debug representation."),
) -> None:
    """Interpret a text message (GET /message)."""

    parsed_context = _parse_context(context)
    try:
        with make_client(ctx.obj) as client:
            result = client.query_message(text, context=parsed_context, n=n)
    except (WitError, ValueError) as exc:
        _fail(exc)

    if raw:
        _console.print(str(result), markup=False)
        return
    if not result.outcomes:
        _console.print("[yellow]No interpretation found.[/yellow]")
        return
    _console.print(build_outcomes_table(result))


@app.command()
def speech(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Audio file (mp3, wav, ulaw, raw)."),
    n: Optional[int] = typer.Option(None, "--n", min=1, help="Maximum number of outcomes."),
    raw: bool = typer.Option(False, "--raw", help="Print the debug representation."),
) -> None:
    """Interpret an audio file (POST /speech)."""

    try:
        with make_client(ctx.obj) as client:
            result = client.query_speech(path, n=n, content_type=guess_audio_content_type(path))
    except (OSError, WitError, ValueError) as exc:
        _fail(exc)

    if raw:
        _console.print(str(result), markup=False)
        return
    _console.print(build_outcomes_table(result))


@app.command()
def converse(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Conversation session id."),
    text: str = typer.Argument(..., help="User text for the first turn."),
    context: Optional[str] = typer.Option(None, "--context", help="Context as a JSON object."),
    max_steps: Optional[int] = typer.Option(None, "--max-steps", min=1, help="Turn limit."),
) -> None:
    """Run the /converse loop until a `stop` turn."""

    parsed_context = _parse_context(context)
    try:
        with make_client(ctx.obj) as client:
            turns = client.converse_until_stop(
                session_id,
                text,
                context=parsed_context,
                max_steps=max_steps,
            )
    except (WitError, ValueError) as exc:
        _fail(exc)

    _console.print(build_turns_table(turns))


@app.command()
def intents(ctx: typer.Context) -> None:
    """List intents (GET /intents)."""

    try:
        with make_client(ctx.obj) as client:
            result = client.list_intents()
    except (WitError, ValueError) as exc:
        _fail(exc)
    _console.print(build_intents_table(result))


@app.command()
def intent(ctx: typer.Context, intent_id: str = typer.Argument(..., help="Intent id or name.")) -> None:
    """Show one intent (GET /intents/{id})."""

    try:
        with make_client(ctx.obj) as client:
            result = client.get_intent(intent_id)
    except (WitError, ValueError) as exc:
        _fail(exc)
    _console.print(str(result), markup=False)


@app.command()
def entities(ctx: typer.Context) -> None:
    """List entity ids (GET /entities)."""

    try:
        with make_client(ctx.obj) as client:
            result = client.list_entities()
    except (WitError, ValueError) as exc:
        _fail(exc)
    for entity_id in result:
        _console.print(entity_id, markup=False)


@app.command()
def entity(ctx: typer.Context, entity_id: str = typer.Argument(..., help="Entity id.")) -> None:
    """Show one entity with its values (GET /entities/{id})."""

    try:
        with make_client(ctx.obj) as client:
            result = client.get_entity(entity_id)
    except (WitError, ValueError) as exc:
        _fail(exc)
    _console.print(build_entity_panel(result))


def run() -> None:
    app()
