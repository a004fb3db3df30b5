"""
Animal catalog use cases (list/get/create/update/delete fact-sheets).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from fauna_api.core.config import get_settings
from fauna_api.core.errors import NotFoundError, ValidationError, pydantic_issues
from fauna_api.domain.query import SORT_TEXT, ListQuery, Page, run_query
from fauna_api.domain.records import animal_projection
from fauna_api.repositories.base import DocumentStore
from fauna_api.repositories.json_documents import JsonDocumentStore
from fauna_api.repositories.json_index import JsonIndexStore
from fauna_api.schemas.animal import AnimalSchema

logger = logging.getLogger("fauna.animals")

ANIMAL_SORT_FIELDS = {
    "nombre": SORT_TEXT,
    "nombre_cientifico": SORT_TEXT,
    "especie": SORT_TEXT,
    "habitat": SORT_TEXT,
}
SERVER_FIELDS = ("id", "created_at", "updated_at")


def validate_animal(body: Any) -> Dict[str, Any]:
    """Validate a request body; returns the cleaned fields without server-owned keys."""
    if not isinstance(body, dict):
        raise ValidationError("Validación inválida", [{"path": "", "message": "Se esperaba un objeto JSON"}])
    try:
        parsed = AnimalSchema.model_validate(body)
    except PydanticValidationError as exc:
        raise ValidationError("Validación inválida", pydantic_issues(exc.errors())) from exc
    return {k: v for k, v in parsed.model_dump().items() if v is not None and k != "id"}


def build_animal_store(data_dir: Path) -> JsonDocumentStore:
    index = JsonIndexStore(Path(data_dir) / "index.json", project=animal_projection)
    return JsonDocumentStore(Path(data_dir) / "animals", index)


class AnimalService:
    """Orchestrates validation, the document store and the query engine."""

    def __init__(self, store: Optional[DocumentStore] = None) -> None:
        self.store = store or build_animal_store(get_settings().data_dir)

    def init_storage(self) -> None:
        self.store.ensure()

    def list_animals(
        self,
        *,
        q: Optional[str] = None,
        especie: Optional[str] = None,
        habitat: Optional[str] = None,
        tag: Optional[str] = None,
        sort: Optional[str] = "nombre",
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        query = ListQuery(
            q=q,
            filters={"especie": especie, "habitat": habitat},
            tag=tag,
            sort=sort,
            page=page,
            limit=limit,
        )
        return run_query(self.store.index.items(), query, ANIMAL_SORT_FIELDS)

    def get_animal(self, animal_id: str) -> Dict[str, Any]:
        doc = self.store.read(animal_id)
        if doc is None:
            raise NotFoundError("No encontrado")
        return doc

    def create_animal(self, body: Any) -> Dict[str, Any]:
        fields = validate_animal(body)
        record = self.store.create(fields)
        logger.info("Animal %s created (%s)", record["id"], record.get("nombre"))
        return record

    def update_animal(self, animal_id: str, patch: Any) -> Dict[str, Any]:
        if not isinstance(patch, dict):
            raise ValidationError("Validación inválida", [{"path": "", "message": "Se esperaba un objeto JSON"}])

        def merge(current: Dict[str, Any]) -> Dict[str, Any]:
            merged = {k: v for k, v in current.items() if k not in SERVER_FIELDS}
            merged.update({k: v for k, v in patch.items() if k not in SERVER_FIELDS})
            fields = validate_animal(merged)
            # explicit nulls clear optional fields
            return {**{k: None for k in merged if k not in fields}, **fields}

        record = self.store.modify(animal_id, merge)
        if record is None:
            raise NotFoundError("No encontrado")
        return record

    def delete_animal(self, animal_id: str) -> None:
        if not self.store.delete(animal_id):
            raise NotFoundError("No encontrado")

    def reindex(self) -> int:
        return self.store.reindex()
