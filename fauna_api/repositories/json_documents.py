"""
One JSON file per record (``<id>.json``) paired with a JsonIndexStore entry.

The document is always written before its index entry is registered. There
is no rollback: if the index write fails after the document landed, the
document stays on disk unindexed until ``reindex()`` runs.
"""

from __future__ import annotations

import json
import logging
import re
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fauna_api.core.errors import StorageError
from fauna_api.repositories.atomic import atomic_write_json, lock_for
from fauna_api.repositories.json_index import JsonIndexStore

logger = logging.getLogger("fauna.storage")

Record = Dict[str, Any]

ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")


def new_id() -> str:
    """12-char URL-safe random id."""
    return secrets.token_urlsafe(9)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonDocumentStore:
    def __init__(self, directory: Path, index: JsonIndexStore) -> None:
        self.directory = Path(directory)
        self.index = index
        self._lock = lock_for(self.directory)

    def ensure(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self.index.ensure()

    def _path(self, record_id: str) -> Optional[Path]:
        if not record_id or not ID_PATTERN.fullmatch(record_id):
            return None
        return self.directory / f"{record_id}.json"

    def _write(self, path: Path, record: Record) -> None:
        try:
            atomic_write_json(path, record)
        except OSError as exc:
            raise StorageError(f"No se pudo escribir el documento {path.name}") from exc

    def read(self, record_id: str) -> Optional[Record]:
        path = self._path(record_id)
        if path is None:
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"No se pudo leer el documento {path.name}") from exc
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Documento corrupto: {path.name}") from exc

    def create(self, fields: Record) -> Record:
        self.ensure()
        with self._lock:
            record_id = new_id()
            while (self.directory / f"{record_id}.json").exists():
                record_id = new_id()
            now = utc_now_iso()
            record = {**fields, "id": record_id, "created_at": now, "updated_at": now}
            self._write(self.directory / f"{record_id}.json", record)
        self.index.append(record)
        logger.info("Created document %s in %s", record_id, self.directory.name)
        return record

    def update(self, record_id: str, patch: Record) -> Optional[Record]:
        """Merge ``patch`` over the stored document; a ``None`` value removes the key."""
        return self.modify(record_id, lambda current: patch)

    def modify(self, record_id: str, change: Callable[[Record], Record]) -> Optional[Record]:
        """Read, merge ``change(current)`` and write back while holding the store lock.

        ``change`` runs under the lock, so whatever it raises aborts the write.
        """
        path = self._path(record_id)
        if path is None:
            return None
        self.ensure()
        with self._lock:
            current = self.read(record_id)
            if current is None:
                return None
            merged = {**current, **change(current)}
            record = {k: v for k, v in merged.items() if v is not None}
            record.update(
                id=current.get("id", record_id),
                created_at=current.get("created_at"),
                updated_at=utc_now_iso(),
            )
            self._write(path, record)
            self.index.append(record)
        return record

    def delete(self, record_id: str) -> bool:
        path = self._path(record_id)
        if path is None:
            return False
        self.ensure()
        with self._lock:
            try:
                path.unlink()
                removed_doc = True
            except FileNotFoundError:
                removed_doc = False
            except OSError as exc:
                raise StorageError(f"No se pudo borrar el documento {path.name}") from exc
        removed_entry = self.index.remove(record_id)
        if removed_entry and not removed_doc:
            logger.warning("Removed stale index entry %s (document was already gone)", record_id)
        return removed_doc or removed_entry

    def documents(self) -> List[Record]:
        self.ensure()
        out: List[Record] = []
        for path in sorted(self.directory.glob("*.json")):
            doc = self.read(path.stem)
            if doc is not None:
                out.append(doc)
        return out

    def reindex(self) -> int:
        """Rebuild the index from the documents on disk."""
        with self._lock:
            count = self.index.replace_all(self.documents())
        logger.info("Reindexed %d documents from %s", count, self.directory)
        return count
