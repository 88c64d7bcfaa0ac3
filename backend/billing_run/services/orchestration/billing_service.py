from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional, Sequence

from ...config import get_settings
from ...exceptions import FinalizationAbortedError
from ...models import Credentials, FinalizationOutcome, Invoice
from ..fastbill import FastbillClient
from .finalization import InvoiceFinalizationWorkflow

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Credentials], FastbillClient]


class BillingRunService:
    """Collaborator interface for the presentation layer (HTTP API, CLI).

    Builds a fresh FastBill client per credential pair, fetches draft
    invoices, and runs the finalization workflow, folding its terminal
    result into a single outcome.
    """

    def __init__(
        self,
        client_factory: Optional[ClientFactory] = None,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.settings = get_settings()
        self._client_factory = client_factory or FastbillClient
        self._today = today

    async def fetch_draft_invoices(self, credentials: Credentials) -> List[Invoice]:
        client = self._client_factory(credentials)
        invoices = await client.list_invoices({"TYPE": self.settings.DRAFT_INVOICE_TYPE})
        logger.info("Fetched %d draft invoice(s)", len(invoices))
        return invoices

    async def run_finalization(self, credentials: Credentials, invoices: Sequence[Invoice]) -> FinalizationOutcome:
        """Finalize the cached draft list and report one terminal outcome.

        Provider failures do not raise; the outcome carries the raw error text.
        """
        if not invoices:
            return FinalizationOutcome(ok=True, message="No invoices to finalize")

        workflow = InvoiceFinalizationWorkflow(self._client_factory(credentials), today=self._today)
        try:
            finalized = await workflow.run(invoices)
        except FinalizationAbortedError as exc:
            return FinalizationOutcome(
                ok=False,
                message=str(exc),
                finalized=exc.finalized,
                failedInvoiceId=exc.invoice_id,
                failedStep=exc.step,
            )
        return FinalizationOutcome(
            ok=True,
            message=f"{len(finalized)} invoice(s) finalized",
            finalized=finalized,
        )
