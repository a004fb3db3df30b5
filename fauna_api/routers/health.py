import time

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    started = getattr(request.app.state, "started_at", time.monotonic())
    return {"ok": True, "uptime": round(time.monotonic() - started, 3)}
