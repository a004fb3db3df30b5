from __future__ import annotations

import json
import os

import pytest

from fauna_api.repositories import atomic
from fauna_api.repositories.atomic import atomic_write, atomic_write_json, lock_for


def test_atomic_write_replaces_content_without_leftovers(tmp_path):
    target = tmp_path / "index.json"
    target.write_text("old", encoding="utf-8")

    atomic_write(target, "new")

    assert target.read_text(encoding="utf-8") == "new"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["index.json"]


def test_atomic_write_json_keeps_non_ascii(tmp_path):
    target = tmp_path / "doc.json"
    atomic_write_json(target, {"nombre": "Águila"})

    raw = target.read_text(encoding="utf-8")
    assert "Águila" in raw
    assert json.loads(raw) == {"nombre": "Águila"}


def test_failed_rename_keeps_original_and_cleans_temp(tmp_path, monkeypatch):
    target = tmp_path / "index.json"
    target.write_text("intacto", encoding="utf-8")

    def _boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(atomic.os, "replace", _boom)
    with pytest.raises(OSError):
        atomic_write(target, "parcial")

    assert target.read_text(encoding="utf-8") == "intacto"
    assert [p.name for p in tmp_path.iterdir()] == ["index.json"]


def test_lock_for_is_shared_per_resolved_path(tmp_path):
    a = lock_for(tmp_path / "x.json")
    b = lock_for(os.path.join(str(tmp_path), ".", "x.json"))
    c = lock_for(tmp_path / "y.json")
    assert a is b
    assert a is not c
