"""Runtime config endpoint for frontend consumption."""
from __future__ import annotations

from urllib.parse import urlparse

from fastapi import APIRouter

from ..config import get_settings

router = APIRouter(tags=["config"])


@router.get("/config")
async def get_config() -> dict:
    """Expose non-sensitive defaults (never the API key)."""
    settings = get_settings()
    return {
        "defaultAccountEmail": settings.FASTBILL_EMAIL,
        "draftFilter": {"TYPE": settings.DRAFT_INVOICE_TYPE},
        "providerHost": urlparse(settings.FASTBILL_API_URL).netloc,
    }
