"""Base común de los modelos de la API (Pydantic v2).

Por qué una base propia:
- La API distingue "campo ausente" de "campo vacío" (`doc` omitido vs `doc: ""`).
  Pydantic ya registra qué campos se suministraron (`model_fields_set`), así que
  la presencia se deriva de ahí en vez de usar valores centinela.
- Centraliza la proyección a JSON de wire (aliases + omitir lo no suministrado).
- Centraliza el render de depuración (`str(model)`).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic.config import ConfigDict

from witai.core.domain.display import render


class WitModel(BaseModel):
    """Registro inmutable con presencia explícita por campo."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    def is_present(self, name: str) -> bool:
        """True si el campo fue suministrado (o venía como key en el JSON)."""

        return name in self.model_fields_set

    def to_wire(self, *, include: set[str] | None = None) -> dict[str, Any]:
        """Proyección JSON para enviar: solo campos suministrados, con aliases.

        Un `None` explícito cuenta como ausente: `Intent(doc=None)` no envía `doc`.
        """

        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_unset=True,
            exclude_none=True,
            include=include,
        )

    def __str__(self) -> str:
        return render(self)
