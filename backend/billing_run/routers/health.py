"""Health and readiness endpoints."""
from __future__ import annotations

from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException

from ..config import get_settings

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict:
    """Liveness probe endpoint."""
    return {
        "status": "ok",
        "service": get_settings().APP_NAME,
        "time": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/readyz")
async def readyz() -> dict:
    """Ready once a FastBill endpoint is configured. Does not call the provider."""
    settings = get_settings()
    if not settings.FASTBILL_API_URL:
        raise HTTPException(status_code=503, detail="FASTBILL_API_URL is not configured")
    return {"status": "ready"}
