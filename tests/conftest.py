"""Shared test fixtures (no network needed)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping
from urllib.parse import parse_qs, urlsplit

import pytest

from witai.core.config import AppSettings
from witai.core.interfaces.transport import TransportResponse
from witai.core.services.client import WitClient


@dataclass
class SentRequest:
    """One call recorded by :class:`ScriptedTransport`."""

    method: str
    url: str
    content: bytes
    headers: dict[str, str]
    timeout: float | None

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    @property
    def query(self) -> dict[str, str]:
        parsed = parse_qs(urlsplit(self.url).query, keep_blank_values=True)
        return {key: values[0] for key, values in parsed.items()}

    def json(self) -> Any:
        return json.loads(self.content)


@dataclass
class ScriptedTransport:
    """Transport stub that replays scripted responses in order."""

    responses: list[TransportResponse | Exception] = field(default_factory=list)
    requests: list[SentRequest] = field(default_factory=list)
    closed: bool = False

    def send(
        self,
        method: str,
        url: str,
        *,
        content: bytes,
        headers: Mapping[str, str],
        timeout: float | None = None,
    ) -> TransportResponse:
        self.requests.append(
            SentRequest(method=method, url=url, content=content, headers=dict(headers), timeout=timeout)
        )
        if not self.responses:
            raise AssertionError(f"unexpected request: {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> SentRequest:
        return self.requests[-1]


def json_response(payload: Any, status_code: int = 200) -> TransportResponse:
    return TransportResponse(status_code=status_code, content=json.dumps(payload).encode("utf-8"))


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> AppSettings:
    for key in list(os.environ):
        if key.upper().startswith("WITAI_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.chdir(tmp_path)
    return AppSettings(_env_file=None, access_token="test-token")


@pytest.fixture
def scripted_client(settings: AppSettings) -> Callable[..., tuple[WitClient, ScriptedTransport]]:
    """Factory: ``client, transport = scripted_client(resp1, resp2, ...)``."""

    def factory(*responses: TransportResponse | Exception) -> tuple[WitClient, ScriptedTransport]:
        transport = ScriptedTransport(responses=list(responses))
        return WitClient(settings=settings, transport=transport), transport

    return factory
