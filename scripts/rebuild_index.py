#!/usr/bin/env python3
"""
Reconstruir data/index.json a partir de los documentos en data/animals/.

Uso:
  python scripts/rebuild_index.py [--data-dir /ruta/a/data]
"""
from __future__ import annotations

import argparse
from pathlib import Path

from fauna_api.core.config import get_settings
from fauna_api.core.log_setup import configure_logging
from fauna_api.services.animal_service import AnimalService, build_animal_store


def main() -> None:
    ap = argparse.ArgumentParser(description="Reconstruir el índice de fichas de animales")
    ap.add_argument("--data-dir", help="Directorio de datos (default: DATA_DIR)")
    args = ap.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)
    data_dir = Path(args.data_dir) if args.data_dir else settings.data_dir
    if not data_dir.is_dir():
        raise SystemExit(f"Directorio inexistente: {data_dir}")

    svc = AnimalService(store=build_animal_store(data_dir))
    count = svc.reindex()
    print(f"OK: {count} fichas indexadas en {data_dir / 'index.json'}")


if __name__ == "__main__":
    main()
