from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Protocol


class RecordIndex(Protocol):
    """Capability set services rely on; JsonIndexStore is the flat-file implementation."""

    def ensure(self) -> None:
        ...

    def items(self) -> List[Dict[str, Any]]:
        """full scan of the indexed projections"""
        ...

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        ...

    def append(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """insert or replace by id; returns the stored projection"""
        ...

    def remove(self, record_id: str) -> bool:
        ...


class DocumentStore(Protocol):
    index: RecordIndex

    def ensure(self) -> None:
        ...

    def read(self, record_id: str) -> Optional[Dict[str, Any]]:
        ...

    def create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def update(self, record_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    def modify(
        self, record_id: str, change: Callable[[Dict[str, Any]], Dict[str, Any]]
    ) -> Optional[Dict[str, Any]]:
        """read-merge-write under the store lock; None values drop keys"""
        ...

    def delete(self, record_id: str) -> bool:
        ...

    def reindex(self) -> int:
        ...
