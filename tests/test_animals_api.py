from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from fauna_api.app import create_app
from fauna_api.core import config as core_config

AJOLOTE = {
    "nombre": "Ajolote",
    "nombre_cientifico": "Ambystoma mexicanum",
    "especie": "Anfibio",
    "habitat": "Lagos",
    "descripcion": "Salamandra neoténica endémica del Valle de México.",
    "estatus_conservacion": "CR",
    "tags": ["endémico"],
    "imagen_url": "/uploads/ajolote.png",
}


@pytest.fixture()
def client(app_env):
    return TestClient(create_app())


def test_animal_crud_over_http(client, app_env):
    created = client.post("/animals", json=AJOLOTE)
    assert created.status_code == 201
    animal = created.json()
    assert (app_env["data"] / "animals" / f"{animal['id']}.json").exists()

    assert client.get(f"/animals/{animal['id']}").json() == animal

    listed = client.get("/animals", params={"q": "neoténica"}).json()
    assert listed["total"] == 1
    assert set(listed["items"][0]) == {"id", "nombre", "nombre_cientifico", "especie", "habitat", "tags"}

    patched = client.patch(f"/animals/{animal['id']}", json={"estatus_conservacion": "EN"})
    assert patched.status_code == 200
    assert patched.json()["estatus_conservacion"] == "EN"
    assert patched.json()["created_at"] == animal["created_at"]

    assert client.delete(f"/animals/{animal['id']}").status_code == 204
    assert client.get(f"/animals/{animal['id']}").status_code == 404
    assert client.delete(f"/animals/{animal['id']}").status_code == 404


def test_invalid_animal_is_400_with_details(client):
    resp = client.post("/animals", json={**AJOLOTE, "estatus_conservacion": "XX", "imagen_url": "img.png"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "validation_error"
    assert {d["path"] for d in body["details"]} == {"estatus_conservacion", "imagen_url"}


def test_non_object_body_is_400(client):
    assert client.post("/animals", json=["no", "objeto"]).status_code == 400


def test_patch_unknown_animal_is_404(client):
    resp = client.patch("/animals/noexiste", json={"nombre": "Xx"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "No encontrado"


def test_list_sorted_by_nombre_with_spanish_collation(client):
    for nombre in ["ajolote de montaña", "Zorro gris", "Águila real", "Ajolote"]:
        assert client.post("/animals", json={**AJOLOTE, "nombre": nombre}).status_code == 201

    names = [i["nombre"] for i in client.get("/animals").json()["items"]]
    assert names == ["Águila real", "Ajolote", "ajolote de montaña", "Zorro gris"]

    by_q = client.get("/animals", params={"q": "ajolote"}).json()
    assert by_q["total"] == 2


def test_oversized_json_body_is_413(app_env, monkeypatch):
    monkeypatch.setenv("JSON_BODY_LIMIT", "64")
    core_config.get_settings.cache_clear()
    client = TestClient(create_app())

    resp = client.post("/animals", json={**AJOLOTE, "descripcion": "x" * 200})

    assert resp.status_code == 413
    assert resp.json()["code"] == "payload_too_large"


def test_chunked_json_body_over_limit_is_413(app_env, monkeypatch):
    monkeypatch.setenv("JSON_BODY_LIMIT", "64")
    core_config.get_settings.cache_clear()
    client = TestClient(create_app())
    payload = json.dumps({**AJOLOTE, "descripcion": "x" * 5000}).encode("utf-8")

    def chunks():
        for start in range(0, len(payload), 512):
            yield payload[start : start + 512]

    resp = client.post("/animals", content=chunks(), headers={"content-type": "application/json"})

    assert resp.status_code == 413
    assert resp.json()["code"] == "payload_too_large"
    assert client.get("/animals").json()["total"] == 0


def test_small_json_body_passes_the_limit(app_env, monkeypatch):
    monkeypatch.setenv("JSON_BODY_LIMIT", "4096")
    core_config.get_settings.cache_clear()
    client = TestClient(create_app())

    assert client.post("/animals", json=AJOLOTE).status_code == 201


def test_rate_limit_returns_429(app_env, monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_MAX", "2")
    core_config.get_settings.cache_clear()
    client = TestClient(create_app())

    assert client.get("/animals").status_code == 200
    assert client.get("/animals").status_code == 200
    blocked = client.get("/animals")
    assert blocked.status_code == 429
    assert "error" in blocked.json()
