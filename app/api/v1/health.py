"""Health endpoints for API v1."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.config import get_config
from app.database.db import get_active_database_url, ping_database

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    cfg = get_config()
    payload = {
        "service": cfg.APP_NAME,
        "version": cfg.APP_VERSION,
        "database": get_active_database_url().split("://", 1)[0],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if not ping_database():
        return JSONResponse(status_code=503, content={"status": "error", **payload})
    return {"status": "ok", **payload}
