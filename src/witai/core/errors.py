"""Errores del cliente.

Por qué tres fases:
- `request`: no se pudo enviar o no hubo respuesta (reintentar).
- `parse`: la respuesta no es JSON válido para la forma esperada (bug-report).
- `response`: la API respondió, pero reporta un error de dominio (corregir input).

El mensaje siempre es `<operación> <fase> error: <causa>`.
"""

from __future__ import annotations

from witai.core.domain.models import ResponseError


class WitError(Exception):
    """Base de todos los errores etiquetados por operación y fase."""

    phase: str = "client"

    def __init__(self, operation: str, cause: object) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} {self.phase} error: {cause}")


class WitRequestError(WitError):
    phase = "request"


class WitParseError(WitError):
    phase = "parse"


class WitResponseError(WitError):
    phase = "response"

    def __init__(
        self,
        operation: str,
        response: ResponseError,
        *,
        status_code: int | None = None,
    ) -> None:
        self.response = response
        self.status_code = status_code
        cause = response.error_message() if response.has_error() else f"HTTP {status_code}"
        super().__init__(operation, cause)

    @property
    def code(self) -> str | None:
        return self.response.code


class ConversationLimitError(WitError):
    """El loop de `/converse` no llegó a un turno `stop` dentro del límite."""

    phase = "limit"

    def __init__(self, operation: str, max_steps: int, turns: list) -> None:
        self.max_steps = max_steps
        self.turns = turns
        super().__init__(operation, f"no stop turn after {max_steps} steps")
