"""
JSON index file: ``{"count": n, "items": [...]}``.

The index holds one projection per record, produced by the ``project``
callable handed to the store (which is where the derived ``_searchText`` is
computed). Every mutation is a whole-file read + whole-file atomic rewrite
performed under the file's lock, so it is only meant for small collections.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fauna_api.core.errors import StorageError
from fauna_api.repositories.atomic import atomic_write_json, lock_for

logger = logging.getLogger("fauna.storage")

Record = Dict[str, Any]


def _identity(record: Record) -> Record:
    return dict(record)


class JsonIndexStore:
    """Secondary index persisted as a single JSON document."""

    def __init__(self, path: Path, project: Optional[Callable[[Record], Record]] = None) -> None:
        self.path = Path(path)
        self._project = project or _identity
        self._lock = lock_for(self.path)

    def ensure(self) -> None:
        """Create the directory and an empty index if missing. Never touches an existing file."""
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                logger.info("Creating empty index at %s", self.path)
                atomic_write_json(self.path, {"count": 0, "items": []})

    def _load(self) -> Dict[str, Any]:
        self.ensure()
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"No se pudo leer el índice {self.path.name}") from exc
        try:
            index = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Índice corrupto: {self.path.name}") from exc
        if not isinstance(index, dict) or not isinstance(index.get("items"), list):
            raise StorageError(f"Índice con formato inválido: {self.path.name}")
        return index

    def _save(self, items: List[Record]) -> None:
        try:
            atomic_write_json(self.path, {"count": len(items), "items": items})
        except OSError as exc:
            raise StorageError(f"No se pudo escribir el índice {self.path.name}") from exc

    def items(self) -> List[Record]:
        with self._lock:
            return list(self._load()["items"])

    def get(self, record_id: str) -> Optional[Record]:
        for item in self.items():
            if item.get("id") == record_id:
                return item
        return None

    def append(self, record: Record) -> Record:
        """Insert the record's projection, or replace it in place when the id is already indexed."""
        item = self._project(record)
        with self._lock:
            items = self._load()["items"]
            for pos, current in enumerate(items):
                if current.get("id") == item.get("id"):
                    items[pos] = item
                    break
            else:
                items.append(item)
            self._save(items)
        return item

    def remove(self, record_id: str) -> bool:
        with self._lock:
            items = self._load()["items"]
            kept = [i for i in items if i.get("id") != record_id]
            if len(kept) == len(items):
                return False
            self._save(kept)
            return True

    def replace_all(self, records: List[Record]) -> int:
        """Rebuild the index from full records. Returns the new count."""
        items = [self._project(r) for r in records]
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._save(items)
        return len(items)
