"""Request schema for animal fact-sheets."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fauna_api.domain.records import normalize_tags

EstatusConservacion = Literal["CR", "EN", "VU", "NT", "LC", "ND"]

EXTRA_MAX_KEYS = 50
EXTRA_MAX_DEPTH = 5


def _depth(value: Any) -> int:
    if isinstance(value, dict):
        return 1 + max((_depth(v) for v in value.values()), default=0)
    if isinstance(value, list):
        return 1 + max((_depth(v) for v in value), default=0)
    return 0


class AnimalSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    # Accepted for compatibility but always replaced by the server.
    id: Optional[str] = None
    nombre: str = Field(min_length=2)
    nombre_cientifico: str = Field(min_length=2)
    especie: str = Field(min_length=2)
    habitat: str = Field(min_length=2)
    descripcion: str = Field(min_length=10)
    estatus_conservacion: EstatusConservacion = "ND"
    tags: List[str] = Field(default_factory=list)
    imagen_url: Optional[str] = None
    fuente: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: List[str]) -> List[str]:
        return normalize_tags(value)

    @field_validator("imagen_url", mode="before")
    @classmethod
    def _blank_image_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("imagen_url")
    @classmethod
    def _check_image_reference(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value.startswith("/uploads/"):
            return value
        parsed = urlparse(value)
        if parsed.scheme in {"http", "https"} and parsed.netloc and " " not in value:
            return value
        raise ValueError("Debe comenzar con /uploads/ o ser URL http(s)")

    @field_validator("extra")
    @classmethod
    def _bound_extra(cls, value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if value is None:
            return value
        if len(value) > EXTRA_MAX_KEYS:
            raise ValueError(f"Máximo {EXTRA_MAX_KEYS} claves")
        if _depth(value) > EXTRA_MAX_DEPTH:
            raise ValueError(f"Anidamiento máximo {EXTRA_MAX_DEPTH}")
        return value
