from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, File, Form, Query, Request, Response, UploadFile

from fauna_api.core.config import get_settings
from fauna_api.domain.records import parse_tag_list, public_view
from fauna_api.services.file_service import FileService
from fauna_api.services.uploads import read_upload

router = APIRouter(tags=["files"])


def _get_file_service(request: Request) -> FileService:
    svc = getattr(getattr(request.app, "state", None), "file_service", None)
    if not svc:
        raise RuntimeError("FileService no configurado")
    return svc


@router.post("/upload", status_code=201)
def upload_single(
    request: Request,
    file: Optional[UploadFile] = File(None),
    tags: str = Form(""),
):
    svc = _get_file_service(request)
    incoming = read_upload(file, get_settings().max_upload_bytes) if file is not None else None
    return svc.upload_one(incoming, parse_tag_list(tags))


@router.post("/uploads", status_code=201)
def upload_many(
    request: Request,
    files: List[UploadFile] = File(default=[]),
    files_brackets: List[UploadFile] = File(default=[], alias="files[]"),
    tags: str = Form(""),
):
    svc = _get_file_service(request)
    max_bytes = get_settings().max_upload_bytes
    incoming = [read_upload(f, max_bytes) for f in [*files, *files_brackets]]
    stored = svc.upload_many(incoming, parse_tag_list(tags))
    return {"files": stored}


# GET /files?q=ajolote&mime=image/png&ext=png&tag=endémico&sort=created_at|filename|size&page=1&limit=20
@router.get("/files")
def list_files(
    request: Request,
    q: Optional[str] = None,
    mime: Optional[str] = None,
    ext: Optional[str] = None,
    tag: Optional[str] = None,
    sort: str = "created_at",
    page: int = Query(1, ge=1),
    limit: int = 20,
):
    svc = _get_file_service(request)
    out = svc.list_files(q=q, mime=mime, ext=ext, tag=tag, sort=sort, page=page, limit=limit)
    payload = out.as_dict()
    payload["items"] = [public_view(i) for i in out.items]
    return payload


@router.get("/files/{file_id}")
def get_file(file_id: str, request: Request):
    return public_view(_get_file_service(request).get_file(file_id))


@router.delete("/files/{file_id}", status_code=204)
def delete_file(file_id: str, request: Request):
    _get_file_service(request).delete_file(file_id)
    return Response(status_code=204)


@router.get("/search/suggest")
def suggest(request: Request, q: str = ""):
    return {"q": q, "suggestions": _get_file_service(request).suggest(q)}
