from __future__ import annotations

import threading

import pytest

from fauna_api.core.errors import NotFoundError, ValidationError
from fauna_api.services import animal_service
from fauna_api.services.animal_service import AnimalService, build_animal_store


@pytest.fixture()
def svc(tmp_path):
    service = AnimalService(store=build_animal_store(tmp_path / "data"))
    service.init_storage()
    return service


def _body(**extra) -> dict:
    body = {
        "nombre": "Ajolote",
        "nombre_cientifico": "Ambystoma mexicanum",
        "especie": "Anfibio",
        "habitat": "Lagos",
        "descripcion": "Salamandra neoténica endémica del Valle de México.",
    }
    body.update(extra)
    return body


def _paths(exc_info) -> set:
    return {d["path"] for d in exc_info.value.details}


def test_ajolote_scenario_search_and_collation(svc):
    svc.create_animal(_body())
    svc.create_animal(
        _body(
            nombre="Águila",
            nombre_cientifico="Aquila chrysaetos",
            especie="Ave",
            habitat="Montañas",
            descripcion="Ave rapaz de gran tamaño, símbolo nacional.",
        )
    )
    svc.create_animal(_body(nombre="ajolote de montaña", nombre_cientifico="Ambystoma altamirani"))

    found = svc.list_animals(q="ajolote")
    assert found.total == 2
    assert {i["nombre"] for i in found.items} == {"Ajolote", "ajolote de montaña"}

    ordered = [i["nombre"] for i in svc.list_animals(sort="nombre").items]
    assert ordered == ["Águila", "Ajolote", "ajolote de montaña"]


def test_create_applies_defaults_and_cleans_tags(svc):
    created = svc.create_animal(_body(tags=[" endémico ", "", "agua", "endémico"], imagen_url=""))

    assert created["estatus_conservacion"] == "ND"
    assert created["tags"] == ["endémico", "agua"]
    assert "imagen_url" not in created
    assert svc.get_animal(created["id"]) == created


def test_client_id_is_ignored(svc):
    created = svc.create_animal(_body(id="elegido-por-mi"))
    assert created["id"] != "elegido-por-mi"


def test_validation_reports_field_paths(svc):
    with pytest.raises(ValidationError) as exc_info:
        svc.create_animal(_body(nombre=" A ", descripcion="corta", estatus_conservacion="XX", desconocido=1))

    assert exc_info.value.status_code == 400
    assert {"nombre", "descripcion", "estatus_conservacion", "desconocido"} <= _paths(exc_info)


def test_missing_required_fields(svc):
    with pytest.raises(ValidationError) as exc_info:
        svc.create_animal({"nombre": "Ajolote"})
    assert {"nombre_cientifico", "especie", "habitat", "descripcion"} <= _paths(exc_info)


@pytest.mark.parametrize("url", ["/uploads/ajolote.png", "https://example.org/a.jpg", "http://cdn.test/x"])
def test_image_reference_accepts_urls_and_upload_paths(svc, url):
    assert svc.create_animal(_body(imagen_url=url))["imagen_url"] == url


@pytest.mark.parametrize("url", ["ftp://example.org/a.jpg", "imagenes/a.png", "https://"])
def test_image_reference_rejects_other_values(svc, url):
    with pytest.raises(ValidationError) as exc_info:
        svc.create_animal(_body(imagen_url=url))
    assert "imagen_url" in _paths(exc_info)


def test_extra_is_bounded(svc):
    ok = svc.create_animal(_body(extra={"peso_kg": 0.2, "fuentes": [{"url": "https://a.test"}]}))
    assert ok["extra"]["peso_kg"] == 0.2

    with pytest.raises(ValidationError):
        svc.create_animal(_body(extra={f"k{n}": n for n in range(51)}))
    with pytest.raises(ValidationError):
        svc.create_animal(_body(extra={"a": {"b": {"c": {"d": {"e": {"f": 1}}}}}}))


def test_update_merges_patch_and_refreshes_projection(svc):
    created = svc.create_animal(_body(tags=["agua"], fuente="CONABIO"))

    updated = svc.update_animal(created["id"], {"habitat": "Canales de Xochimilco", "tags": ["agua", "canal"]})

    assert updated["id"] == created["id"]
    assert updated["created_at"] == created["created_at"]
    assert updated["nombre"] == "Ajolote"
    assert updated["fuente"] == "CONABIO"
    assert svc.list_animals(tag="canal").total == 1
    assert svc.list_animals(habitat="canales de xochimilco").total == 1


def test_update_can_clear_optional_fields_but_not_required_ones(svc):
    created = svc.create_animal(_body(fuente="CONABIO"))

    cleared = svc.update_animal(created["id"], {"fuente": None})
    assert "fuente" not in cleared
    assert "fuente" not in svc.get_animal(created["id"])

    with pytest.raises(ValidationError):
        svc.update_animal(created["id"], {"nombre": None})
    with pytest.raises(ValidationError):
        svc.update_animal(created["id"], {"descripcion": "corta"})


def test_update_and_delete_unknown_raise_not_found(svc):
    with pytest.raises(NotFoundError):
        svc.update_animal("noexiste", {"nombre": "Xx"})
    with pytest.raises(NotFoundError):
        svc.delete_animal("noexiste")
    with pytest.raises(NotFoundError):
        svc.get_animal("noexiste")


def test_delete_then_get_is_not_found(svc):
    created = svc.create_animal(_body())
    svc.delete_animal(created["id"])
    with pytest.raises(NotFoundError):
        svc.get_animal(created["id"])
    assert svc.list_animals().total == 0


def test_filters_by_especie_and_pagination(svc):
    for n in range(5):
        svc.create_animal(_body(nombre=f"Rana {n}", especie="Anfibio" if n % 2 else "Ave"))

    page = svc.list_animals(especie="ANFIBIO", page=1, limit=1)
    assert page.total == 2
    assert [i["nombre"] for i in page.items] == ["Rana 1"]
    assert svc.list_animals(limit=0).items == []


def test_reindex_recovers_lost_index(svc):
    created = svc.create_animal(_body())
    svc.store.index.path.unlink()

    assert svc.list_animals().total == 0
    assert svc.reindex() == 1
    assert svc.list_animals().items[0]["id"] == created["id"]


def test_concurrent_updates_do_not_lose_each_other(svc, monkeypatch):
    created = svc.create_animal(_body())
    real_validate = animal_service.validate_animal
    rename = threading.Thread(target=svc.update_animal, args=(created["id"], {"nombre": "Axolotl"}))
    calls = []

    def validate_while_renaming(body):
        calls.append(body)
        if len(calls) == 1:
            rename.start()
            # the rename must wait for this update to finish writing
            rename.join(timeout=0.2)
            assert rename.is_alive()
        return real_validate(body)

    monkeypatch.setattr(animal_service, "validate_animal", validate_while_renaming)

    svc.update_animal(created["id"], {"habitat": "Canales"})
    rename.join(timeout=5)

    final = svc.get_animal(created["id"])
    assert final["habitat"] == "Canales"
    assert final["nombre"] == "Axolotl"
    assert svc.list_animals(q="axolotl").total == 1
