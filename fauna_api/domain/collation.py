"""
Spanish-like collation used when sorting text fields.

Mirrors ``Intl.Collator("es", {sensitivity: "base", numeric: true})``:
accents and case are ignored, ``ñ`` stays a letter of its own between ``n``
and ``o``, digit runs compare by numeric value, and punctuation/whitespace
sort before digits, which sort before letters.
"""
from __future__ import annotations

import re
import unicodedata
from typing import Any, List, Tuple

_TOKEN = re.compile(r"\d+|\D")

PUNCTUATION = 0
NUMBER = 1
LETTER = 2

_ENYE_WEIGHT = ord("n") * 2 + 1


def _char_elements(ch: str) -> List[Tuple[int, int]]:
    folded = ch.casefold()
    if folded == "ñ":
        return [(LETTER, _ENYE_WEIGHT)]
    out = []
    for c in unicodedata.normalize("NFKD", folded):
        if unicodedata.combining(c):
            continue
        if c.isdecimal():
            out.append((NUMBER, int(c)))
        elif c.isalnum():
            out.append((LETTER, ord(c) * 2))
        else:
            out.append((PUNCTUATION, ord(c)))
    return out


def collation_key(value: Any) -> Tuple[Tuple[int, int], ...]:
    """Sort key for ``value``; ``None`` collates as the empty string."""
    text = unicodedata.normalize("NFC", "" if value is None else str(value))
    elements: List[Tuple[int, int]] = []
    for token in _TOKEN.findall(text):
        if token.isdecimal():
            elements.append((NUMBER, int(token)))
        else:
            elements.extend(_char_elements(token))
    return tuple(elements)
