from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok"}


@router.get("/api/health")
async def api_health(request: Request) -> dict:
    """Liveness plus the last known database state; the app stays up while the database is down."""
    monitor = getattr(request.app.state, "db_monitor", None)
    return {
        "status": "ok",
        "database": monitor.status if monitor is not None else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
