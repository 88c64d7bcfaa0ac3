"""Billing router: fetch draft invoices and run the monthly finalization.

Thin HTTP layer over `BillingRunService`; provider errors are translated to
HTTP responses here.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import get_billing_service
from ..exceptions import NotFoundError, InvoicingError
from ..models import DraftInvoicesRequest, DraftInvoicesResponse, FinalizationOutcome, FinalizeRequest
from ..services.orchestration.billing_service import BillingRunService

router = APIRouter(prefix="/invoices", tags=["invoices"])  # mounted under /api


@router.post("/drafts", response_model=DraftInvoicesResponse)
async def fetch_drafts(
    payload: DraftInvoicesRequest,
    service: BillingRunService = Depends(get_billing_service),
) -> DraftInvoicesResponse:
    """Return the account's current draft invoices with provider field names."""
    try:
        invoices = await service.fetch_draft_invoices(payload.credentials())
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except InvoicingError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return DraftInvoicesResponse(invoices=[inv.model_dump(mode="json", by_alias=True) for inv in invoices])


@router.post("/finalize", response_model=FinalizationOutcome)
async def finalize(
    payload: FinalizeRequest,
    service: BillingRunService = Depends(get_billing_service),
) -> FinalizationOutcome:
    """Date, complete and e-mail the given drafts in order; stops at the first failure."""
    return await service.run_finalization(payload.credentials(), payload.invoices)
