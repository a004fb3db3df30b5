from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import FileResponse

from fauna_api.core.config import get_settings
from fauna_api.services.convocatoria_service import ConvocatoriaService
from fauna_api.services.uploads import read_upload

router = APIRouter(tags=["convocatorias"])


def _get_service(request: Request) -> ConvocatoriaService:
    svc = getattr(getattr(request.app, "state", None), "convocatoria_service", None)
    if not svc:
        raise RuntimeError("ConvocatoriaService no configurado")
    return svc


@router.get("/api/convocatorias")
def list_convocatorias(request: Request):
    return _get_service(request).list_convocatorias()


@router.post("/api/convocatorias")
def create_convocatoria(
    request: Request,
    titulo: str = Form(""),
    password: str = Form(""),
    archivo: Optional[UploadFile] = File(None),
):
    svc = _get_service(request)
    incoming = read_upload(archivo, get_settings().max_upload_bytes) if archivo is not None else None
    return svc.create(titulo, password, incoming)


@router.get("/convocatorias/{filename}")
def download_convocatoria(filename: str, request: Request):
    path = _get_service(request).resolve_download(filename)
    return FileResponse(path, filename=path.name)
