"""
Configuration helpers for the fauna backend.

Routers/services read paths, limits and secrets from the Settings object built
here instead of fetching os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

from .security import hash_password

PACKAGE_ROOT = Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_dir: Path
    uploads_dir: Path
    convocatorias_dir: Path
    cors_origin: str
    max_upload_bytes: int
    max_files_per_request: int
    json_body_limit: int
    rate_limit_max: int
    rate_limit_window_seconds: int
    log_level: str
    convocatorias_password_hash: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _path(name: str, default: Path) -> Path:
        raw = (os.getenv(name) or "").strip()
        return Path(raw).expanduser() if raw else default

    password_hash = (os.getenv("CONVOCATORIAS_PASSWORD_HASH") or "").strip()
    if not password_hash:
        password_hash = hash_password(os.getenv("CONVOCATORIAS_PASSWORD", "1234"))

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_dir=_path("DATA_DIR", PACKAGE_ROOT / "data"),
        uploads_dir=_path("UPLOADS_DIR", PACKAGE_ROOT / "uploads"),
        convocatorias_dir=_path("CONVOCATORIAS_DIR", PACKAGE_ROOT / "convocatorias"),
        cors_origin=os.getenv("CORS_ORIGIN", "*").strip() or "*",
        max_upload_bytes=_int(os.getenv("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)), 20 * 1024 * 1024),
        max_files_per_request=_int(os.getenv("MAX_FILES_PER_REQUEST", "10"), 10),
        json_body_limit=_int(os.getenv("JSON_BODY_LIMIT", str(2 * 1024 * 1024)), 2 * 1024 * 1024),
        rate_limit_max=_int(os.getenv("RATE_LIMIT_MAX", "100"), 100),
        rate_limit_window_seconds=_int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"), 60),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        convocatorias_password_hash=password_hash,
    )
