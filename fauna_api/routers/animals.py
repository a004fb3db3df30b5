from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, Request, Response

from fauna_api.domain.records import public_view
from fauna_api.services.animal_service import AnimalService

router = APIRouter(prefix="/animals", tags=["animals"])


def _get_animal_service(request: Request) -> AnimalService:
    svc = getattr(getattr(request.app, "state", None), "animal_service", None)
    if not svc:
        raise RuntimeError("AnimalService no configurado")
    return svc


@router.get("")
def list_animals(
    request: Request,
    q: Optional[str] = None,
    especie: Optional[str] = None,
    habitat: Optional[str] = None,
    tag: Optional[str] = None,
    sort: str = "nombre",
    page: int = Query(1, ge=1),
    limit: int = 20,
):
    out = _get_animal_service(request).list_animals(
        q=q, especie=especie, habitat=habitat, tag=tag, sort=sort, page=page, limit=limit
    )
    payload = out.as_dict()
    payload["items"] = [public_view(i) for i in out.items]
    return payload


@router.get("/{animal_id}")
def get_animal(animal_id: str, request: Request):
    return _get_animal_service(request).get_animal(animal_id)


@router.post("", status_code=201)
def create_animal(payload: dict, request: Request):
    return _get_animal_service(request).create_animal(payload)


@router.patch("/{animal_id}")
def update_animal(animal_id: str, payload: dict, request: Request):
    return _get_animal_service(request).update_animal(animal_id, payload)


@router.delete("/{animal_id}", status_code=204)
def delete_animal(animal_id: str, request: Request):
    _get_animal_service(request).delete_animal(animal_id)
    return Response(status_code=204)
