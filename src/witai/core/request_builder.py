"""Construcción de URLs y bodies.

Reglas:
- Un parámetro no suministrado (`None`) nunca aparece en la query ni en el JSON.
- Las keys de la query se ordenan lexicográficamente (URLs reproducibles en tests).
- Los uploads no pasan por JSON: los bytes del archivo son el body.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence
from urllib.parse import quote, quote_plus

from pydantic import BaseModel

from witai.core.domain.fields import WitModel

JSON_CONTENT_TYPE = "application/json"

AUDIO_MPEG3 = "audio/mpeg3"
AUDIO_WAV = "audio/wav"
AUDIO_ULAW = "audio/ulaw"
AUDIO_RAW = "audio/raw"

AUDIO_CONTENT_TYPES: dict[str, str] = {
    ".mp3": AUDIO_MPEG3,
    ".wav": AUDIO_WAV,
    ".ulaw": AUDIO_ULAW,
    ".raw": AUDIO_RAW,
}


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, WitModel):
        return value.to_wire()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if isinstance(value, Mapping):
        return {str(k): _to_jsonable(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    return value


def _dumps(value: Any) -> str:
    return json.dumps(_to_jsonable(value), ensure_ascii=False, separators=(",", ":"))


def encode_query_value(value: Any) -> str:
    """Stringifica un valor de query (antes del percent-encoding)."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (BaseModel, Mapping, list, tuple)):
        return _dumps(value)
    return str(value)


def build_url(base: str, params: Mapping[str, Any] | None = None) -> str:
    present = {key: value for key, value in (params or {}).items() if value is not None}
    if not present:
        return base

    query = "&".join(
        f"{quote_plus(key)}={quote_plus(encode_query_value(present[key]))}"
        for key in sorted(present)
    )
    return f"{base}?{query}"


def build_path(*segments: Any) -> str:
    """`build_path("entities", "a/b")` -> `/entities/a%2Fb`."""

    return "/" + "/".join(quote(str(segment), safe="") for segment in segments)


def build_body(payload: WitModel | Mapping[str, Any] | Sequence[Any] | None) -> bytes:
    if payload is None:
        return b""
    return _dumps(payload).encode("utf-8")


def read_upload(path: str | Path) -> bytes:
    """Lee el archivo a subir. Un `OSError` se propaga tal cual."""

    return Path(path).read_bytes()


def guess_audio_content_type(path: str | Path, default: str = AUDIO_MPEG3) -> str:
    return AUDIO_CONTENT_TYPES.get(Path(path).suffix.lower(), default)
