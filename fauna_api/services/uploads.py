"""
Helpers shared by the upload endpoints: bounded reads, stored-name building
and image payload checks.
"""

from __future__ import annotations

import io
import os
import re
import secrets
import time
from dataclasses import dataclass
from typing import Optional

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from fauna_api.core.errors import PayloadTooLargeError, UnsupportedMediaError

READ_CHUNK = 1024 * 1024
MAX_BASENAME = 60

# declared MIME type -> format name reported by Pillow
RASTER_FORMATS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
    "image/gif": "GIF",
}


@dataclass
class IncomingFile:
    originalname: str
    mimetype: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def read_upload(upload: UploadFile, max_bytes: int) -> IncomingFile:
    """Read an UploadFile fully, failing as soon as it grows past ``max_bytes``."""
    buffer = bytearray()
    while True:
        chunk = upload.file.read(READ_CHUNK)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise PayloadTooLargeError(f"Archivo demasiado grande (máximo {max_bytes} bytes)")
    mimetype = (upload.content_type or "application/octet-stream").split(";", 1)[0].strip().lower()
    return IncomingFile(originalname=upload.filename or "", mimetype=mimetype, data=bytes(buffer))


def stored_name(originalname: str, *, prefix: Optional[str] = None) -> str:
    """``"Mi Foto.PNG"`` -> ``"<ms>-<rand>-Mi_Foto.png"``."""
    name = os.path.basename((originalname or "").replace("\\", "/"))
    base, ext = os.path.splitext(name)
    ext = ext.lower()
    if not re.fullmatch(r"\.[a-z0-9]{1,10}", ext):
        ext = ""
    base = re.sub(r"\s+", "_", base)
    base = re.sub(r"[^\w.-]", "", base).strip(".")[:MAX_BASENAME] or "archivo"
    head = prefix or f"{int(time.time() * 1000)}-{secrets.token_hex(3)}"
    return f"{head}-{base}{ext}"


def is_safe_name(name: str) -> bool:
    """True when ``name`` is a bare file name (no directories, no dot entries)."""
    return bool(name) and name not in {".", ".."} and os.path.basename(name) == name and "\\" not in name


def check_image_payload(incoming: IncomingFile) -> None:
    """Raster images must decode and match their declared type."""
    expected = RASTER_FORMATS.get(incoming.mimetype)
    if expected is None:
        return
    try:
        with Image.open(io.BytesIO(incoming.data)) as image:
            detected = image.format
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise UnsupportedMediaError("Imagen inválida o dañada") from exc
    if detected != expected:
        raise UnsupportedMediaError("El contenido no coincide con el tipo de archivo declarado")
