"""Render determinista de entidades para logs y diagnóstico.

Formato:
- `{Campo: valor, ...}` en el orden de declaración del modelo.
- Los campos ausentes (None, listas/mapas vacíos) no aparecen.
- Floats siempre con 6 decimales; booleanos siempre presentes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel


def field_label(name: str) -> str:
    """`message_id` -> `MessageId`."""

    return "".join(part.capitalize() for part in name.split("_") if part)


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:.6f}"
    if isinstance(value, BaseModel):
        return render(value)
    if isinstance(value, dict):
        inner = ", ".join(f"{key}: {format_value(item)}" for key, item in value.items())
        return "{" + inner + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def render(model: BaseModel) -> str:
    """Representación `{Field: value}` de cualquier modelo pydantic."""

    parts: list[str] = []
    for name, info in type(model).model_fields.items():
        value = getattr(model, name)
        # `Field(title=...)` fija la etiqueta cuando no sale del nombre.
        label = info.title or field_label(name)
        if isinstance(value, bool):
            parts.append(f"{label}: {format_value(value)}")
            continue
        if value is None:
            continue
        if isinstance(value, (list, tuple, dict)) and not value:
            continue
        parts.append(f"{label}: {format_value(value)}")
    return "{" + ", ".join(parts) + "}"
