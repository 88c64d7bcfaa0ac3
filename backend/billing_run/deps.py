"""FastAPI dependencies."""
from __future__ import annotations

from .services.orchestration.billing_service import BillingRunService


def get_billing_service() -> BillingRunService:
    """Return the billing run service.

    A new instance per request; tests override this via `app.dependency_overrides`.
    """
    return BillingRunService()
