"""Cliente de la API HTTP de Wit.ai (protocolo 20160330).

Cada operación sigue el mismo flujo:
    parámetros -> URL/body -> transporte -> JSON -> detección de error -> tipo.

Los fallos se etiquetan por fase (`request`, `parse`, `response`) para que el
caller distinga "reintentar", "reportar bug" y "corregir input". No hay
reintentos internos: la política de retry es del caller.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from pydantic import TypeAdapter, ValidationError

from witai.core.config import AppSettings
from witai.core.domain.models import (
    INTENT_UPDATE_FIELDS,
    Context,
    Converse,
    ConverseType,
    Deleted,
    Entity,
    EntityValue,
    Intent,
    IntentExpression,
    Message,
    ResponseError,
)
from witai.core.errors import (
    ConversationLimitError,
    WitParseError,
    WitRequestError,
    WitResponseError,
)
from witai.core.interfaces.transport import Transport, TransportError
from witai.core.logger import get_logger
from witai.core.request_builder import (
    AUDIO_MPEG3,
    JSON_CONTENT_TYPE,
    build_body,
    build_path,
    build_url,
    read_upload,
)

logger = get_logger("witai.client")

ContextLike = Union[Context, Mapping[str, Any]]
ActionHook = Callable[[Converse, Optional[ContextLike]], Optional[ContextLike]]


@dataclass(frozen=True)
class ClientConfig:
    """Configuración inmutable de una instancia de cliente."""

    token: str
    version: str
    base_url: str

    @property
    def authorization(self) -> str:
        return f"Bearer {self.token}"

    @property
    def accept(self) -> str:
        return f"application/vnd.wit.{self.version}+json"

    def headers(self, content_type: str = JSON_CONTENT_TYPE) -> dict[str, str]:
        return {
            "Authorization": self.authorization,
            "Accept": self.accept,
            "Content-Type": content_type,
        }


@lru_cache(maxsize=None)
def _adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


class WitClient:
    """Cliente síncrono y reentrante.

    No guarda estado mutable entre llamadas: solo la configuración (token,
    versión) fijada al construir y el transporte.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        version: str | None = None,
        settings: AppSettings | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        token = token or self._settings.access_token
        if not token:
            raise ValueError("A Wit.ai access token is required (argument or WITAI_ACCESS_TOKEN).")

        self._config = ClientConfig(
            token=token,
            version=version or self._settings.api_version,
            base_url=self._settings.base_url.rstrip("/"),
        )
        self._owns_transport = transport is None
        if transport is None:
            from witai.adapters.http_client import HttpxTransport  # noqa: PLC0415

            transport = HttpxTransport(settings=self._settings)
        self._transport = transport

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def token(self) -> str:
        return self._config.token

    @property
    def version(self) -> str:
        return self._config.version

    def close(self) -> None:
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> "WitClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Núcleo request -> decode -> error
    # ------------------------------------------------------------------

    def _call(
        self,
        operation: str,
        method: str,
        path: str,
        result_type: Any,
        *,
        params: Mapping[str, Any] | None = None,
        content: bytes = b"",
        content_type: str = JSON_CONTENT_TYPE,
        timeout: float | None = None,
        echo_key: str | None = None,
    ) -> Any:
        url = build_url(f"{self._config.base_url}{path}", params)
        log = logger.bind(operation=operation, method=method, path=path)
        log.debug("Sending request", body_bytes=len(content))

        try:
            response = self._transport.send(
                method,
                url,
                content=content,
                headers=self._config.headers(content_type),
                timeout=timeout,
            )
        except TransportError as exc:
            log.warning("Request failed", error=str(exc))
            raise WitRequestError(operation, exc) from exc

        try:
            payload = json.loads(response.content)
        except ValueError as exc:
            log.warning("Response is not JSON", status=response.status_code)
            raise WitParseError(operation, exc) from exc

        if isinstance(payload, dict):
            fields = payload
            # `{echo_key, body}` es un eco de creación: ahí `body` no es un error.
            if echo_key is not None and echo_key in payload:
                fields = {k: v for k, v in payload.items() if k != "body"}
            try:
                envelope = ResponseError.model_validate(fields)
            except ValidationError as exc:
                raise WitParseError(operation, exc) from exc
            if envelope.has_error():
                log.warning(
                    "Remote error",
                    status=response.status_code,
                    code=envelope.code,
                    error=envelope.error_message(),
                )
                raise WitResponseError(operation, envelope, status_code=response.status_code)

        if response.status_code >= 400:
            log.warning("HTTP error without error payload", status=response.status_code)
            raise WitResponseError(operation, ResponseError(), status_code=response.status_code)

        return self._decode(operation, result_type, payload)

    def _decode(self, operation: str, result_type: Any, payload: Any) -> Any:
        try:
            return _adapter(result_type).validate_python(payload)
        except ValidationError as exc:
            logger.warning("Response does not match expected shape", operation=operation, errors=exc.error_count())
            raise WitParseError(operation, exc) from exc

    # ------------------------------------------------------------------
    # Mensajes (texto / voz)
    # ------------------------------------------------------------------

    def query_message(
        self,
        query: str,
        *,
        context: ContextLike | None = None,
        msg_id: str | None = None,
        thread_id: str | None = None,
        n: int | None = None,
        timeout: float | None = None,
    ) -> Message:
        """Interpreta un texto (`GET /message`)."""

        params = {
            "q": query,
            "context": context,
            "msg_id": msg_id,
            "thread_id": thread_id,
            "n": n,
        }
        return self._call("message", "GET", "/message", Message, params=params, timeout=timeout)

    def query_speech(
        self,
        path: str | Path,
        *,
        context: ContextLike | None = None,
        msg_id: str | None = None,
        thread_id: str | None = None,
        n: int | None = None,
        content_type: str = AUDIO_MPEG3,
        timeout: float | None = None,
    ) -> Message:
        """Interpreta un archivo de audio (`POST /speech`).

        El archivo se lee antes de cualquier I/O de red; si no se puede leer,
        el `OSError` se propaga sin envolver.
        """

        data = read_upload(path)
        params = {
            "context": context,
            "msg_id": msg_id,
            "thread_id": thread_id,
            "n": n,
        }
        return self._call(
            "speech",
            "POST",
            "/speech",
            Message,
            params=params,
            content=data,
            content_type=content_type,
            timeout=timeout,
        )

    def get_message(self, msg_id: str, *, timeout: float | None = None) -> Message:
        return self._call("get message", "GET", build_path("messages", msg_id), Message, timeout=timeout)

    # ------------------------------------------------------------------
    # Conversación
    # ------------------------------------------------------------------

    def _converse(
        self,
        session_id: str,
        query: str | None,
        context: ContextLike | None,
        timeout: float | None,
    ) -> Converse:
        params = {"session_id": session_id, "q": query or None}
        body = build_body(context if context is not None else {})
        return self._call(
            "converse",
            "POST",
            "/converse",
            Converse,
            params=params,
            content=body,
            timeout=timeout,
        )

    def converse_first(
        self,
        session_id: str,
        query: str,
        *,
        context: ContextLike | None = None,
        timeout: float | None = None,
    ) -> Converse:
        """Inicia (o continúa) una sesión con texto del usuario."""

        return self._converse(session_id, query, context, timeout)

    def converse_next(
        self,
        session_id: str,
        *,
        context: ContextLike | None = None,
        timeout: float | None = None,
    ) -> Converse:
        """Avanza la sesión sin texto nuevo (tras un turno `action`)."""

        return self._converse(session_id, None, context, timeout)

    def converse_until_stop(
        self,
        session_id: str,
        query: str,
        *,
        context: ContextLike | None = None,
        max_steps: int | None = None,
        on_action: ActionHook | None = None,
        timeout: float | None = None,
    ) -> list[Converse]:
        """Ejecuta el loop `/converse` hasta un turno `stop`.

        Devuelve todos los turnos en orden (el último es `stop`). Tras un turno
        `action`, `on_action(turn, context)` puede devolver un contexto nuevo.
        El loop está acotado por `max_steps` (o `converse_max_steps`).
        """

        limit = max_steps if max_steps is not None else self._settings.converse_max_steps
        if limit < 1:
            raise ValueError("max_steps must be >= 1")

        turns = [self.converse_first(session_id, query, context=context, timeout=timeout)]
        while not turns[-1].is_stop:
            if len(turns) >= limit:
                logger.warning("Conversation did not stop", session_id=session_id, steps=len(turns))
                raise ConversationLimitError("converse", limit, turns)

            last = turns[-1]
            if on_action is not None and last.type is ConverseType.ACTION:
                updated = on_action(last, context)
                if updated is not None:
                    context = updated

            turns.append(self.converse_next(session_id, context=context, timeout=timeout))
        return turns

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def list_intents(self, *, timeout: float | None = None) -> list[Intent]:
        return self._call("intents", "GET", "/intents", list[Intent], timeout=timeout)

    def get_intent(self, intent_id: str, *, timeout: float | None = None) -> Intent:
        return self._call("intent", "GET", build_path("intents", intent_id), Intent, timeout=timeout)

    def create_intent(self, intent: Intent, *, timeout: float | None = None) -> Intent:
        return self._call(
            "new intent",
            "POST",
            "/intents",
            Intent,
            content=build_body(intent),
            timeout=timeout,
        )

    def create_intents(self, *intents: Intent, timeout: float | None = None) -> list[Intent]:
        """Crea intents en lote (`POST /intents`).

        Con un intent se envía el objeto y con varios la lista. La respuesta
        puede ser una lista, `{"intents": [...]}` o un único intent.
        """

        if not intents:
            raise ValueError("at least one intent is required")

        payload = intents[0] if len(intents) == 1 else list(intents)
        created = self._call(
            "new intents",
            "POST",
            "/intents",
            Union[list[Intent], dict[str, Any]],
            content=build_body(payload),
            timeout=timeout,
        )
        if isinstance(created, list):
            return created
        return self._decode("new intents", list[Intent], created.get("intents", [created]))

    def update_intent(self, intent_id: str, intent: Intent, *, timeout: float | None = None) -> Intent:
        """Actualiza atributos (`name`, `doc`, `metadata`); el resto se ignora."""

        body = build_body(intent.to_wire(include=INTENT_UPDATE_FIELDS))
        return self._call(
            "update intent",
            "PUT",
            build_path("intents", intent_id),
            Intent,
            content=body,
            timeout=timeout,
        )

    def delete_intent(self, intent_id: str, *, timeout: float | None = None) -> Deleted:
        return self._call("delete intent", "DELETE", build_path("intents", intent_id), Deleted, timeout=timeout)

    def add_intent_expressions(
        self,
        intent_id: str,
        *expressions: str | IntentExpression,
        timeout: float | None = None,
    ) -> list[IntentExpression]:
        if not expressions:
            raise ValueError("at least one expression is required")

        items: Sequence[IntentExpression] = [
            IntentExpression.of(item) if isinstance(item, str) else item for item in expressions
        ]
        created = self._call(
            "new intent expressions",
            "POST",
            build_path("intents", intent_id, "expressions"),
            Union[list[IntentExpression], IntentExpression],
            content=build_body(list(items)),
            timeout=timeout,
            echo_key="intent_id",
        )
        if isinstance(created, IntentExpression):
            return [created]
        return created

    def delete_intent_expression(
        self,
        intent_id: str,
        expression: str,
        *,
        timeout: float | None = None,
    ) -> Deleted:
        return self._call(
            "delete intent expression",
            "DELETE",
            build_path("intents", intent_id, "expressions", expression),
            Deleted,
            timeout=timeout,
        )

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def list_entities(self, *, timeout: float | None = None) -> list[str]:
        return self._call("entities", "GET", "/entities", list[str], timeout=timeout)

    def create_entity(self, entity: Entity, *, timeout: float | None = None) -> Entity:
        return self._call(
            "new entity",
            "POST",
            "/entities",
            Entity,
            content=build_body(entity),
            timeout=timeout,
        )

    def get_entity(self, entity_id: str, *, timeout: float | None = None) -> Entity:
        return self._call("entity", "GET", build_path("entities", entity_id), Entity, timeout=timeout)

    def update_entity(self, entity_id: str, entity: Entity, *, timeout: float | None = None) -> Entity:
        return self._call(
            "update entity",
            "PUT",
            build_path("entities", entity_id),
            Entity,
            content=build_body(entity),
            timeout=timeout,
        )

    def delete_entity(self, entity_id: str, *, timeout: float | None = None) -> Deleted:
        return self._call("delete entity", "DELETE", build_path("entities", entity_id), Deleted, timeout=timeout)

    def add_entity_value(self, entity_id: str, value: EntityValue, *, timeout: float | None = None) -> Entity:
        return self._call(
            "new entity value",
            "POST",
            build_path("entities", entity_id, "values"),
            Entity,
            content=build_body(value),
            timeout=timeout,
        )

    def delete_entity_value(self, entity_id: str, value: str, *, timeout: float | None = None) -> Deleted:
        return self._call(
            "delete entity value",
            "DELETE",
            build_path("entities", entity_id, "values", value),
            Deleted,
            timeout=timeout,
        )

    def add_value_expression(
        self,
        entity_id: str,
        value: str,
        expression: str,
        *,
        timeout: float | None = None,
    ) -> Entity:
        return self._call(
            "new value expression",
            "POST",
            build_path("entities", entity_id, "values", value, "expressions"),
            Entity,
            content=build_body({"expression": expression}),
            timeout=timeout,
        )

    def delete_value_expression(
        self,
        entity_id: str,
        value: str,
        expression: str,
        *,
        timeout: float | None = None,
    ) -> Deleted:
        return self._call(
            "delete value expression",
            "DELETE",
            build_path("entities", entity_id, "values", value, "expressions", expression),
            Deleted,
            timeout=timeout,
        )
