"""Convocatoria announcements: password-protected uploads listed from a JSON file."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from fauna_api.core.config import get_settings
from fauna_api.core.errors import (
    NotFoundError,
    StorageError,
    UnauthorizedError,
    UnsupportedMediaError,
    ValidationError,
)
from fauna_api.core.security import verify_password
from fauna_api.repositories.atomic import atomic_write, atomic_write_json, lock_for
from fauna_api.repositories.json_documents import utc_now_iso
from fauna_api.services.uploads import IncomingFile, check_image_payload, is_safe_name, stored_name

logger = logging.getLogger("fauna.convocatorias")

CATALOG_NAME = "convocatorias.json"
PUBLIC_PREFIX = "/convocatorias"

# MIME type -> "tipo" shown to clients
TIPOS = {
    "application/pdf": "pdf",
    "image/png": "png",
    "image/jpeg": "jpg",
}


class ConvocatoriaService:
    def __init__(self, directory: Optional[Path] = None, password_hash: Optional[str] = None) -> None:
        settings = get_settings()
        self.directory = Path(directory or settings.convocatorias_dir)
        self.password_hash = password_hash or settings.convocatorias_password_hash
        self.catalog = self.directory / CATALOG_NAME
        self._lock = lock_for(self.catalog)

    def init_storage(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def list_convocatorias(self) -> List[Dict[str, Any]]:
        if not self.catalog.exists():
            return []
        try:
            data = json.loads(self.catalog.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StorageError("No se pudo leer el catálogo de convocatorias") from exc
        except json.JSONDecodeError as exc:
            raise StorageError("Catálogo de convocatorias corrupto") from exc
        if not isinstance(data, list):
            raise StorageError("Catálogo de convocatorias con formato inválido")
        return data

    def create(self, titulo: str, password: str, incoming: Optional[IncomingFile]) -> Dict[str, Any]:
        if not verify_password(password or "", self.password_hash):
            raise UnauthorizedError("Contraseña incorrecta")
        if incoming is None:
            raise ValidationError("Archivo requerido", [{"path": "archivo", "message": "Archivo requerido"}])
        titulo = (titulo or "").strip()
        if not titulo:
            raise ValidationError("Título requerido", [{"path": "titulo", "message": "Título requerido"}])
        tipo = TIPOS.get(incoming.mimetype)
        if tipo is None:
            raise UnsupportedMediaError("Tipo de archivo no permitido")
        check_image_payload(incoming)

        filename = stored_name(incoming.originalname, prefix=str(int(time.time() * 1000)))
        self.init_storage()
        try:
            atomic_write(self.directory / filename, incoming.data)
        except OSError as exc:
            raise StorageError(f"No se pudo guardar {filename}") from exc
        nueva = {
            "id": filename,
            "titulo": titulo,
            "archivoUrl": f"{PUBLIC_PREFIX}/{filename}",
            "tipo": tipo,
            "created_at": utc_now_iso(),
        }
        with self._lock:
            items = self.list_convocatorias()
            items.append(nueva)
            try:
                atomic_write_json(self.catalog, items)
            except OSError as exc:
                raise StorageError("No se pudo actualizar el catálogo de convocatorias") from exc
        logger.info("Convocatoria %s published (%s)", filename, tipo)
        return nueva

    def resolve_download(self, filename: str) -> Path:
        if not is_safe_name(filename) or filename == CATALOG_NAME:
            raise NotFoundError("Archivo no encontrado")
        path = self.directory / filename
        if not path.is_file():
            raise NotFoundError("Archivo no encontrado")
        return path
