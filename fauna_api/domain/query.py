"""
In-memory filter / sort / paginate over index projections.

``run_query`` is pure: it never touches storage and never mutates the list it
receives. Sorting is stable, so an unknown sort key keeps the original order.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .collation import collation_key
from .records import SEARCH_TEXT_KEY

SORT_TEXT = "text"
SORT_NUMBER = "number"
SORT_TIME = "time"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class ListQuery:
    q: Optional[str] = None
    # record field -> expected value (case-insensitive equality)
    filters: Mapping[str, Optional[str]] = field(default_factory=dict)
    tag: Optional[str] = None
    sort: Optional[str] = None
    page: int = 1
    limit: int = 20


@dataclass
class Page:
    total: int
    page: int
    limit: int
    items: List[Dict[str, Any]]

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _timestamp(value: Any) -> datetime:
    if not value:
        return EPOCH
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


_KEY_BUILDERS: Dict[str, Callable[[Any], Any]] = {
    SORT_TEXT: collation_key,
    SORT_NUMBER: _number,
    SORT_TIME: _timestamp,
}


def _matches(item: Mapping[str, Any], query: ListQuery) -> bool:
    if query.q:
        needle = str(query.q).lower()
        if needle not in str(item.get(SEARCH_TEXT_KEY) or ""):
            return False
    for name, expected in query.filters.items():
        if not expected:
            continue
        if str(item.get(name) or "").lower() != str(expected).lower():
            return False
    if query.tag:
        wanted = str(query.tag).lower()
        if wanted not in {str(t).lower() for t in item.get("tags") or []}:
            return False
    return True


def paginate(items: Sequence[Dict[str, Any]], page: int, limit: int) -> List[Dict[str, Any]]:
    """1-based page slice; ``limit <= 0`` selects nothing, ``page < 1`` counts as page 1."""
    if limit <= 0:
        return []
    start = (max(page, 1) - 1) * limit
    return list(items[start : start + limit])


def run_query(
    items: Sequence[Dict[str, Any]],
    query: ListQuery,
    sort_fields: Mapping[str, str],
) -> Page:
    """Apply filters (AND), the sort declared in ``sort_fields`` and pagination."""
    selected = [item for item in items if _matches(item, query)]

    kind = sort_fields.get(query.sort or "")
    if kind is not None:
        build = _KEY_BUILDERS[kind]
        selected.sort(key=lambda item: build(item.get(query.sort)))

    return Page(
        total=len(selected),
        page=max(query.page, 1),
        limit=query.limit,
        items=paginate(selected, query.page, query.limit),
    )
