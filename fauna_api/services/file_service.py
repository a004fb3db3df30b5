"""
Uploaded-file use cases: store binaries, keep files-index.json in sync and
answer list/search/suggest queries.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from fauna_api.core.config import get_settings
from fauna_api.core.errors import NotFoundError, StorageError, UnsupportedMediaError, ValidationError
from fauna_api.domain.query import SORT_NUMBER, SORT_TEXT, SORT_TIME, ListQuery, Page, run_query
from fauna_api.domain.records import file_projection
from fauna_api.repositories.atomic import atomic_write
from fauna_api.repositories.base import RecordIndex
from fauna_api.repositories.json_documents import utc_now_iso
from fauna_api.repositories.json_index import JsonIndexStore
from fauna_api.services.uploads import IncomingFile, check_image_payload, is_safe_name, stored_name

logger = logging.getLogger("fauna.files")

ALLOWED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/gif",
        "image/svg+xml",
        "application/pdf",
        "text/plain",
        "text/csv",
        "application/json",
    }
)

FILE_SORT_FIELDS = {
    "filename": SORT_TEXT,
    "size": SORT_NUMBER,
    "created_at": SORT_TIME,
}
SUGGEST_LIMIT = 10
PUBLIC_PREFIX = "/uploads"


class FileService:
    def __init__(
        self,
        index: Optional[RecordIndex] = None,
        uploads_dir: Optional[Path] = None,
    ) -> None:
        settings = get_settings()
        self.index = index or JsonIndexStore(settings.data_dir / "files-index.json", project=file_projection)
        self.uploads_dir = Path(uploads_dir or settings.uploads_dir)

    def init_storage(self) -> None:
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        self.index.ensure()

    # -------------------------- uploads --------------------------
    def check(self, incoming: IncomingFile) -> None:
        if incoming.mimetype not in ALLOWED_MIME_TYPES:
            raise UnsupportedMediaError("Tipo de archivo no permitido")
        check_image_payload(incoming)

    def _store(self, incoming: IncomingFile, tags: List[str]) -> Dict[str, Any]:
        filename = stored_name(incoming.originalname)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        try:
            atomic_write(self.uploads_dir / filename, incoming.data)
        except OSError as exc:
            raise StorageError(f"No se pudo guardar {filename}") from exc
        meta = {
            "id": filename,
            "url": f"{PUBLIC_PREFIX}/{filename}",
            "filename": filename,
            "originalname": incoming.originalname,
            "size": incoming.size,
            "mimetype": incoming.mimetype,
            "ext": os.path.splitext(filename)[1].lstrip("."),
            "tags": list(tags),
            "created_at": utc_now_iso(),
        }
        self.index.append(meta)
        logger.info("Stored upload %s (%d bytes, %s)", filename, incoming.size, incoming.mimetype)
        return meta

    def upload_one(self, incoming: Optional[IncomingFile], tags: List[str]) -> Dict[str, Any]:
        if incoming is None:
            raise ValidationError("Archivo requerido", [{"path": "file", "message": "Archivo requerido"}])
        self.check(incoming)
        return self._store(incoming, tags)

    def upload_many(self, incoming: Sequence[IncomingFile], tags: List[str]) -> List[Dict[str, Any]]:
        """Validate every file first, then store them one by one."""
        if not incoming:
            raise ValidationError("No se recibieron archivos", [{"path": "files", "message": "No se recibieron archivos"}])
        max_files = get_settings().max_files_per_request
        if len(incoming) > max_files:
            raise ValidationError(
                f"Máximo {max_files} archivos por solicitud",
                [{"path": "files", "message": f"Máximo {max_files} archivos"}],
            )
        for item in incoming:
            self.check(item)
        # a failure midway leaves the earlier files stored and indexed
        return [self._store(item, tags) for item in incoming]

    # -------------------------- queries --------------------------
    def list_files(
        self,
        *,
        q: Optional[str] = None,
        mime: Optional[str] = None,
        ext: Optional[str] = None,
        tag: Optional[str] = None,
        sort: Optional[str] = "created_at",
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        query = ListQuery(
            q=q,
            filters={"mimetype": mime, "ext": ext},
            tag=tag,
            sort=sort,
            page=page,
            limit=limit,
        )
        return run_query(self.index.items(), query, FILE_SORT_FIELDS)

    def get_file(self, file_id: str) -> Dict[str, Any]:
        meta = self.index.get(file_id)
        if meta is None:
            raise NotFoundError("No encontrado")
        return meta

    def suggest(self, q: str) -> List[Dict[str, Any]]:
        found = self.list_files(q=q, sort="filename", page=1, limit=SUGGEST_LIMIT)
        return [{"id": i.get("id"), "filename": i.get("filename"), "url": i.get("url")} for i in found.items]

    def delete_file(self, file_id: str) -> None:
        if not is_safe_name(file_id):
            raise NotFoundError("No encontrado")
        try:
            (self.uploads_dir / file_id).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StorageError(f"No se pudo borrar {file_id}") from exc
        if not self.index.remove(file_id):
            raise NotFoundError("No encontrado")
        logger.info("Deleted upload %s", file_id)
