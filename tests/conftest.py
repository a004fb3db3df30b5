from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

# Garantiza que el paquete fauna_api sea importable durante las pruebas locales
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# fauna_api.app builds a default instance at import time; keep it out of the source tree
_SESSION_DIR = Path(tempfile.mkdtemp(prefix="fauna-tests-"))
os.environ.setdefault("DATA_DIR", str(_SESSION_DIR / "data"))
os.environ.setdefault("UPLOADS_DIR", str(_SESSION_DIR / "uploads"))
os.environ.setdefault("CONVOCATORIAS_DIR", str(_SESSION_DIR / "convocatorias"))

from fauna_api.core import config as core_config  # noqa: E402


@pytest.fixture()
def app_env(tmp_path, monkeypatch):
    """Aponta todos los directorios de datos a tmp_path y resetea el cache de settings."""
    data_dir = tmp_path / "data"
    uploads_dir = tmp_path / "uploads"
    convocatorias_dir = tmp_path / "convocatorias"
    monkeypatch.setenv("DATA_DIR", str(data_dir))
    monkeypatch.setenv("UPLOADS_DIR", str(uploads_dir))
    monkeypatch.setenv("CONVOCATORIAS_DIR", str(convocatorias_dir))
    monkeypatch.setenv("CONVOCATORIAS_PASSWORD", "secreto")
    monkeypatch.delenv("CONVOCATORIAS_PASSWORD_HASH", raising=False)
    monkeypatch.setenv("RATE_LIMIT_MAX", "10000")
    core_config.get_settings.cache_clear()

    yield {"data": data_dir, "uploads": uploads_dir, "convocatorias": convocatorias_dir}

    core_config.get_settings.cache_clear()
