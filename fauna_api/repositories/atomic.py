"""
Rename-based atomic writes and the per-file locks guarding read-modify-write.

Readers never observe a half-written file: data goes to a sibling temp file
which is then ``os.replace``d over the destination. Atomicity covers ONE file
only; a crash between a document write and its index update can leave the
two out of sync.
"""

from __future__ import annotations

import json
import os
import secrets
import threading
import time
from pathlib import Path
from typing import Any, Dict, Union

PathLike = Union[str, Path]

_registry_lock = threading.Lock()
_file_locks: Dict[str, threading.RLock] = {}


def lock_for(path: PathLike) -> threading.RLock:
    """Return the process-wide lock serializing writers of ``path``."""
    key = str(Path(path).resolve())
    with _registry_lock:
        lock = _file_locks.get(key)
        if lock is None:
            lock = threading.RLock()
            _file_locks[key] = lock
        return lock


def _temp_sibling(path: Path) -> Path:
    stamp = int(time.time() * 1000)
    return path.with_name(f"{path.name}.{stamp}.{secrets.token_hex(4)}.tmp")


def atomic_write(path: PathLike, data: Union[bytes, str]) -> None:
    target = Path(path)
    payload = data.encode("utf-8") if isinstance(data, str) else data
    tmp = _temp_sibling(target)
    try:
        with tmp.open("wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def atomic_write_json(path: PathLike, value: Any) -> None:
    atomic_write(path, dump_json(value))
