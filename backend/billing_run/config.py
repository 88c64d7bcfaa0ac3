"""Application settings and configuration helpers."""
from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional
from dotenv import load_dotenv, find_dotenv


DEFAULT_EMAIL_MESSAGE = (
    "Hallo!\n"
    "\n"
    "Anbei findest du deine Beitragsrechnung für den vorherigen Monat.\n"
    "\n"
    "Vielen Dank und liebe Grüße!"
)


class Settings:
    """Runtime configuration loaded from environment variables.

    Defaults target the KalkSpace FastBill account. The API key is never
    given a default; callers pass credentials per request.
    """

    APP_NAME: str = "Billing Run API"
    API_PREFIX: str = "/api"

    # CORS
    CORS_ORIGINS: List[str]

    # FastBill
    FASTBILL_API_URL: str
    FASTBILL_EMAIL: str
    FASTBILL_API_KEY: str
    FASTBILL_TIMEOUT_SECONDS: Optional[float]

    # Billing run
    DRAFT_INVOICE_TYPE: str
    EMAIL_SUBJECT_TEMPLATE: str  # formatted with {month}
    EMAIL_MESSAGE: str

    # Logging
    LOG_LEVEL: str

    def __init__(self) -> None:
        # Load .env once (supports parent directories)
        load_dotenv(find_dotenv(usecwd=True), override=False)
        self.CORS_ORIGINS = self._get_list("CORS_ORIGINS", default="*")

        self.FASTBILL_API_URL = os.getenv("FASTBILL_API_URL", "https://my.fastbill.com/api/1.0/api.php")
        self.FASTBILL_EMAIL = os.getenv("FASTBILL_EMAIL", "vorstand@kalk.space")
        self.FASTBILL_API_KEY = os.getenv("FASTBILL_API_KEY", "")
        # Unset means httpx transport defaults apply
        raw_timeout = os.getenv("FASTBILL_TIMEOUT_SECONDS", "").strip()
        self.FASTBILL_TIMEOUT_SECONDS = float(raw_timeout) if raw_timeout else None

        self.DRAFT_INVOICE_TYPE = os.getenv("DRAFT_INVOICE_TYPE", "draft")
        self.EMAIL_SUBJECT_TEMPLATE = os.getenv("EMAIL_SUBJECT_TEMPLATE", "KalkSpace Coworking Beitrag {month}")
        self.EMAIL_MESSAGE = os.getenv("EMAIL_MESSAGE", DEFAULT_EMAIL_MESSAGE)

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @staticmethod
    def _get_list(name: str, default: str = "") -> List[str]:
        raw = os.getenv(name, default)
        return [item.strip() for item in raw.split(",") if item.strip()] or ["*"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
