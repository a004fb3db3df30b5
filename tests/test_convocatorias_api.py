from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from fauna_api.convocatorias_app import create_convocatorias_app

PDF = b"%PDF-1.4\n%fake\n"


@pytest.fixture()
def client(app_env):
    return TestClient(create_convocatorias_app())


def _publish(client, password="secreto", titulo="Convocatoria 2024", archivo=("bases.pdf", PDF, "application/pdf")):
    files = {"archivo": archivo} if archivo else None
    return client.post("/api/convocatorias", data={"titulo": titulo, "password": password}, files=files)


def test_publish_list_and_download(client, app_env):
    assert client.get("/api/convocatorias").json() == []

    resp = _publish(client)
    assert resp.status_code == 200
    nueva = resp.json()
    assert nueva["titulo"] == "Convocatoria 2024"
    assert nueva["tipo"] == "pdf"
    assert nueva["archivoUrl"].startswith("/convocatorias/")
    assert nueva["archivoUrl"].endswith("-bases.pdf")

    assert client.get("/api/convocatorias").json() == [nueva]

    download = client.get(nueva["archivoUrl"])
    assert download.status_code == 200
    assert download.content == PDF
    assert "attachment" in download.headers["content-disposition"]


def test_wrong_password_is_401_and_nothing_is_stored(client, app_env):
    resp = _publish(client, password="1234")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Contraseña incorrecta"
    assert list(app_env["convocatorias"].iterdir()) == []


def test_password_is_checked_before_the_file(client):
    assert _publish(client, password="mala", archivo=None).status_code == 401
    assert _publish(client, archivo=None).status_code == 400


def test_rejects_unsupported_types(client):
    resp = _publish(client, archivo=("script.sh", b"#!/bin/sh", "application/x-sh"))
    assert resp.status_code == 400


def test_download_unknown_or_catalog_is_404(client):
    _publish(client)
    assert client.get("/convocatorias/no-existe.pdf").status_code == 404
    assert client.get("/convocatorias/convocatorias.json").status_code == 404


def test_app_factory_exposes_both_apps():
    from fauna_api.app_factory import convocatorias_app, public_app

    public_paths = {getattr(r, "path", "") for r in public_app.routes}
    convocatoria_paths = {getattr(r, "path", "") for r in convocatorias_app.routes}
    assert {"/upload", "/files", "/animals", "/health"} <= public_paths
    assert "/api/convocatorias" in convocatoria_paths
