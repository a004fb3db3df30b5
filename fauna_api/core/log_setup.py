"""Process-wide logging setup shared by both app factories."""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the ``fauna`` logger tree (idempotent)."""
    logger = logging.getLogger("fauna")
    logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
    if not any(getattr(h, "_fauna", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._fauna = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
