"""Configuración del cliente.

Por qué aquí:
- Un solo lugar para token, versión del protocolo y host (pydantic-settings).
- El cliente, el adaptador HTTP y la CLI leen los mismos valores.

Orden de resolución: argumentos explícitos > variables `WITAI_*` >
`.env` del directorio actual > `.env` de usuario (ver `UserEnvFile`).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_VERSION = "20160330"
DEFAULT_BASE_URL = "https://api.wit.ai"

_APP_DIR = "witai"
_ENV_HEADER = "# witai user config (.env)"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (APPDATA, Application Support o XDG)."""

    home = Path.home()
    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA") or home) / _APP_DIR
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / _APP_DIR
    return Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config") / _APP_DIR


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


@dataclass(frozen=True)
class UserEnvFile:
    """`.env` de usuario editable desde la CLI (`witai doctor setup-token`).

    Las claves se guardan ordenadas; comentarios y líneas inválidas se descartan
    al reescribir.
    """

    path: Path

    def read(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        entries: dict[str, str] = {}
        for line in self.path.read_text(encoding="utf-8").splitlines():
            key, sep, value = line.strip().partition("=")
            if not sep or key.startswith("#") or not key.strip():
                continue
            entries[key.strip()] = value.strip().strip("\"'")
        return entries

    def update(self, values: dict[str, str | None]) -> Path:
        entries = self.read()
        entries.update((key, value) for key, value in values.items() if value is not None)

        body = [_ENV_HEADER, *(f"{key}={entries[key]}" for key in sorted(entries))]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("\n".join(body) + "\n", encoding="utf-8")
        return self.path


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Fusiona `values` en el `.env` de usuario; los `None` no se escriben."""

    return UserEnvFile(get_user_env_file()).update(values)


class AppSettings(BaseSettings):
    """Configuración central del cliente Wit.ai.

    Por qué pydantic-settings:
    - Valida en el borde (env vars, `.env`) y deja el core con valores tipados.
    - Los tests construyen `AppSettings(_env_file=None, ...)` sin tocar disco.
    """

    model_config = SettingsConfigDict(
        env_prefix="WITAI_",
        extra="ignore",
        case_sensitive=False,
        # El `.env` del proyecto (último) pisa al de usuario.
        env_file=(str(get_user_env_file()), ".env"),
        env_file_encoding="utf-8",
    )

    access_token: str | None = Field(
        default=None,
        description="Server/client access token de la app Wit.ai.",
    )
    api_version: str = Field(
        default=DEFAULT_API_VERSION,
        min_length=1,
        description="Versión del protocolo (header Accept).",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        pattern=r"^https?://",
        description="Host base de la API.",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Deadline por request si el caller no pasa `timeout`.",
    )
    user_agent: str = Field(
        default="witai-python/0.1",
        min_length=1,
        description="User-Agent de las peticiones.",
    )
    converse_max_steps: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Máximo de turnos de /converse antes de abortar el loop.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR).",
    )
