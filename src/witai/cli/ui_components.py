"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from witai.core.domain.models import Converse, Entity, Intent, Message


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida (solo en modo interactivo)."""

    title = Text("witai", style="bold cyan")
    subtitle = Text("Intents • Entities • Conversation", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _compact(value: Any) -> str:
    if not value:
        return ""
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def build_outcomes_table(message: Message) -> Table:
    """Tabla de outcomes de un `Message`, en el orden de la API."""

    title = "Outcomes"
    if message.text is not None:
        title = f"Outcomes for {message.text!r}"

    table = Table(title=title)
    table.add_column("Intent", style="cyan", no_wrap=True)
    table.add_column("Confidence", style="green", justify="right")
    table.add_column("Entities", style="magenta")
    for outcome in message.outcomes:
        table.add_row(
            outcome.intent or "-",
            f"{outcome.confidence:.6f}",
            _compact(outcome.entities),
        )
    return table


def build_turns_table(turns: Iterable[Converse]) -> Table:
    table = Table(title="Conversation")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Message / Action", style="white")
    table.add_column("Confidence", style="green", justify="right")
    for index, turn in enumerate(turns, start=1):
        detail = turn.message if turn.message is not None else (turn.action or "")
        table.add_row(
            str(index),
            turn.type.value if turn.type is not None else "-",
            detail,
            f"{turn.confidence:.6f}",
        )
    return table


def build_intents_table(intents: Iterable[Intent]) -> Table:
    table = Table(title="Intents")
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Doc", style="white")
    for intent in intents:
        table.add_row(intent.id or "-", intent.name or "-", intent.doc or "")
    return table


def build_entity_panel(entity: Entity) -> Panel:
    """Panel con flags y valores de una `Entity`."""

    title = Text(entity.name or entity.id or "entity", style="bold yellow")
    body = Text()
    if entity.doc:
        body.append(entity.doc.strip() + "\n\n")
    flags = f"closed={entity.closed} exotic={entity.exotic} builtin={entity.builtin}"
    body.append(flags + "\n", style="dim")
    if entity.lang:
        body.append(f"lang={entity.lang}\n", style="dim")
    if entity.values:
        body.append("\nValues:\n", style="bold")
        for value in entity.values:
            expressions = ", ".join(value.expressions)
            body.append(f"- {value.value}")
            if expressions:
                body.append(f"  ({expressions})", style="dim")
            body.append("\n")
    return Panel(body, title=title, border_style="yellow")
