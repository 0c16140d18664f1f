"""Contrato del transporte HTTP.

Por qué Protocol:
- El core solo necesita "enviar método + URL + bytes + headers, recibir bytes".
- Permite sustituir httpx por un transporte guionado en tests sin herencia.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Protocol, runtime_checkable


class TransportError(Exception):
    """Fallo de red: la request no se envió o no hubo respuesta."""


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    content: bytes


@runtime_checkable
class Transport(Protocol):
    """Contrato mínimo del colaborador HTTP.

    Reglas de diseño:
    - `send` es bloqueante; la concurrencia es responsabilidad del caller.
    - Los fallos de red se levantan como `TransportError`.
    - `timeout` (segundos) es el deadline de la llamada; `None` usa el default.
    """

    def send(
        self,
        method: str,
        url: str,
        *,
        content: bytes,
        headers: Mapping[str, str],
        timeout: float | None = None,
    ) -> TransportResponse:
        ...

    def close(self) -> None:
        ...
