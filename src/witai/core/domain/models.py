"""Modelos del dominio (Pydantic v2) para la API HTTP de Wit.ai (20160330).

Por qué Pydantic en el dominio:
- La API omite casi todos los campos según endpoint/versión; con Pydantic el
  "presente vs ausente" queda registrado sin escribir parsers a mano.
- Los aliases (`_text`, `msg_id`, `msg`) quedan declarados junto al campo.

Nota:
- Estos modelos describen *qué* devuelve/recibe la API, no *cómo* se llama.
- Todos los modelos de respuesta de primer nivel heredan de `ResponseError`.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from witai.core.domain.fields import WitModel


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


class ResponseError(WitModel):
    """Campos de error compartidos por toda respuesta de primer nivel.

    Por qué tres formas:
    - Según endpoint/versión la API reporta un fallo como `error` (+ `code`),
      como lista `errors` (operaciones batch) o como `body` crudo.
    - La detección vive aquí para que ningún call-site tenga chequeos ad hoc.
    """

    error: str | None = Field(
        default=None,
        description="Mensaje de error único.",
    )
    code: str | None = Field(
        default=None,
        description="Código de error asociado a `error`.",
    )
    errors: list[str] = Field(
        default_factory=list,
        description="Errores por ítem (operaciones batch).",
    )
    body: str | None = Field(
        default=None,
        description="Cuerpo de error crudo en respuestas malformadas.",
    )

    @field_validator("error", "code", "body", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        if value is None:
            return None
        return _as_text(value)

    @field_validator("errors", mode="before")
    @classmethod
    def coerce_errors(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [_as_text(item) for item in value]
        return [_as_text(value)]

    def has_error(self) -> bool:
        return self.error is not None or len(self.errors) > 0 or self.body is not None

    def error_message(self) -> str:
        """Errores por ítem, luego `error`, luego `body`; unidos con ','."""

        messages = list(self.errors)
        if self.error is not None:
            messages.append(self.error)
        if self.body is not None:
            messages.append(self.body)
        return ",".join(messages)


def has_error(response: ResponseError) -> bool:
    return response.has_error()


def error_message(response: ResponseError) -> str:
    return response.error_message()


class Location(WitModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class EntityValue(WitModel):
    """Valor canónico de una entidad y sus expresiones disparadoras."""

    value: str | None = Field(default=None, description="Valor canónico.")
    expressions: list[str] = Field(
        default_factory=list,
        description="Frases que disparan este valor.",
    )
    metadata: str | None = Field(default=None)


class Entity(ResponseError):
    """Tipo de slot con nombre (p.ej. `datetime`, `location`).

    `closed` indica un conjunto finito de valores. Los flags booleanos siempre
    tienen valor (False por defecto) y siempre se muestran.
    """

    id: str | None = None
    name: str | None = None
    doc: str | None = None
    lang: str | None = None
    closed: bool = False
    exotic: bool = False
    builtin: bool = False
    values: list[EntityValue] = Field(default_factory=list)


class Context(WitModel):
    """Estado conversacional suministrado por el caller."""

    state: Any = Field(
        default=None,
        description="Estado opaco (la API acepta string o lista de strings).",
    )
    reference_time: str | None = Field(
        default=None,
        description="Hora de referencia ISO-8601 (p.ej. 2016-04-01T10:00:00.000-07:00).",
    )
    timezone: str | None = Field(
        default=None,
        title="TimeZone",
        description="Zona horaria (p.ej. America/Los_Angeles).",
    )
    entities: list[Entity] | None = None
    location: Location | None = None


class Outcome(WitModel):
    """Una interpretación candidata de una consulta de texto/voz."""

    text: str | None = Field(default=None, alias="_text")
    intent: str | None = None
    entities: dict[str, Any] = Field(
        default_factory=dict,
        description="Mapa libre entidad -> lista de valores reportados.",
    )
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @field_validator("entities", mode="before")
    @classmethod
    def entities_or_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def entity_values(self, name: str) -> list[Any]:
        """Valores (`value`) reportados para una entidad, en orden."""

        return _entity_values(self.entities, name)

    def first_entity_value(self, name: str, default: Any = None) -> Any:
        values = self.entity_values(name)
        return values[0] if values else default


class Message(ResponseError):
    """Resultado de `/message`, `/speech` y `/messages/{id}`.

    Una lista `outcomes` vacía significa "sin interpretación".
    """

    message_id: str | None = Field(default=None, alias="msg_id")
    text: str | None = Field(default=None, alias="_text")
    outcomes: list[Outcome] = Field(default_factory=list)

    def best_outcome(self) -> Outcome | None:
        if not self.outcomes:
            return None
        return max(self.outcomes, key=lambda outcome: outcome.confidence)


class ConverseType(str, Enum):
    """Tipo de turno; `stop` termina el loop de conversación."""

    MSG = "msg"
    ACTION = "action"
    MERGE = "merge"
    STOP = "stop"


class Converse(ResponseError):
    """Un turno de `/converse`."""

    type: ConverseType | None = None
    message: str | None = Field(default=None, alias="msg")
    action: str | None = None
    entities: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    quickreplies: list[str] | None = None

    @field_validator("entities", mode="before")
    @classmethod
    def entities_or_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def is_stop(self) -> bool:
        return self.type is ConverseType.STOP

    def entity_values(self, name: str) -> list[Any]:
        return _entity_values(self.entities, name)


class IntentExpression(WitModel):
    """Frase de entrenamiento de un intent.

    Según endpoint es solo `body` (al crear) o el eco `{intent_id, body}`.
    """

    id: str | None = None
    body: str | None = None
    intent_id: str | None = None

    @classmethod
    def of(cls, body: str) -> "IntentExpression":
        return cls(body=body)


def expressions_of(*bodies: str) -> list[IntentExpression]:
    return [IntentExpression.of(body) for body in bodies]


class Intent(ResponseError):
    """Vista consolidada de un intent (listado, detalle y atributos)."""

    id: str | None = None
    name: str | None = None
    doc: str | None = None
    metadata: str | None = None
    expressions: list[IntentExpression] | None = None
    meta: dict[str, Any] | None = None


INTENT_UPDATE_FIELDS: set[str] = {"name", "doc", "metadata"}


class Deleted(ResponseError):
    """Eco de un DELETE exitoso."""

    deleted: str | None = None


def _entity_values(entities: dict[str, Any], name: str) -> list[Any]:
    raw = entities.get(name)
    if raw is None:
        return []
    items = raw if isinstance(raw, list) else [raw]
    out: list[Any] = []
    for item in items:
        if isinstance(item, dict):
            if "value" in item:
                out.append(item["value"])
        else:
            out.append(item)
    return out
