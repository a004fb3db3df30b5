"""Index projections and the derived search text for each record type."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

SEARCH_TEXT_KEY = "_searchText"

FILE_SEARCH_FIELDS = ("filename", "originalname", "mimetype", "ext")
ANIMAL_INDEX_FIELDS = ("id", "nombre", "nombre_cientifico", "especie", "habitat")
ANIMAL_SEARCH_FIELDS = ("nombre", "nombre_cientifico", "especie", "habitat", "descripcion")


def normalize_tags(values: Iterable[Any] | None) -> List[str]:
    """Trim, drop empties and de-duplicate while keeping first occurrence order."""
    seen: Dict[str, None] = {}
    for value in values or []:
        tag = str(value).strip()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


def parse_tag_list(raw: str | None) -> List[str]:
    """``"aves, selva,"`` -> ``["aves", "selva"]``."""
    return normalize_tags((raw or "").split(","))


def search_text(record: Mapping[str, Any], fields: Iterable[str]) -> str:
    parts = [str(record.get(name) or "") for name in fields]
    parts.append(" ".join(str(t) for t in record.get("tags") or []))
    return " ".join(parts).lower()


def file_projection(meta: Mapping[str, Any]) -> Dict[str, Any]:
    item = {k: v for k, v in meta.items() if k != SEARCH_TEXT_KEY}
    item["tags"] = list(meta.get("tags") or [])
    item[SEARCH_TEXT_KEY] = search_text(meta, FILE_SEARCH_FIELDS)
    return item


def animal_projection(doc: Mapping[str, Any]) -> Dict[str, Any]:
    item: Dict[str, Any] = {name: doc.get(name) for name in ANIMAL_INDEX_FIELDS}
    item["tags"] = list(doc.get("tags") or [])
    item[SEARCH_TEXT_KEY] = search_text(doc, ANIMAL_SEARCH_FIELDS)
    return item


def public_view(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop private ``_``-prefixed keys before a record leaves the API."""
    return {k: v for k, v in record.items() if not k.startswith("_")}
