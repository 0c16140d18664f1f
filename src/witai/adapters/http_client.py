"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts y headers comunes (User-Agent) para todas las llamadas.
- Implementa `core.interfaces.transport.Transport`, así el cliente no conoce httpx.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

from typing import Mapping

import httpx

from witai.core.config import AppSettings
from witai.core.interfaces.transport import TransportError, TransportResponse


def build_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las operaciones se comporten igual.
    - Permite inyectar un transporte httpx (tests, proxies).
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


class HttpxTransport:
    """Transporte por defecto sobre `httpx.Client` (bloqueante)."""

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        settings: AppSettings | None = None,
    ) -> None:
        self._client = client or build_client(settings)

    def send(
        self,
        method: str,
        url: str,
        *,
        content: bytes,
        headers: Mapping[str, str],
        timeout: float | None = None,
    ) -> TransportResponse:
        try:
            response = self._client.request(
                method,
                url,
                content=content or None,
                headers=dict(headers),
                timeout=httpx.USE_CLIENT_DEFAULT if timeout is None else timeout,
            )
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc
        return TransportResponse(status_code=response.status_code, content=response.content)

    def close(self) -> None:
        self._client.close()
