from __future__ import annotations

import asyncio
import logging
from datetime import date
from enum import Enum
from typing import Callable, List, Sequence

from ...exceptions import FinalizationAbortedError, NotFoundError
from ...models import Invoice
from ..fastbill import FastbillClient

logger = logging.getLogger(__name__)


class FinalizationStep(str, Enum):
    """Per-invoice states, in the order they are reached."""

    DRAFT = "draft"
    VALIDATED = "validated"
    DATED = "dated"
    COMPLETED = "completed"
    REFRESHED = "refreshed"
    EMAILED = "emailed"
    FAILED = "failed"


# Step a failure is reported against, keyed by the last state reached
_NEXT_STEP = {
    FinalizationStep.DRAFT: "validate",
    FinalizationStep.VALIDATED: "update",
    FinalizationStep.DATED: "complete",
    FinalizationStep.COMPLETED: "refresh",
    FinalizationStep.REFRESHED: "sendbyemail",
}


class InvoiceFinalizationWorkflow:
    """Takes draft invoices to completed-and-emailed, one invoice at a time.

    Per invoice: set INVOICE_DATE to today -> complete -> fetch customer and
    refreshed invoice concurrently -> e-mail. The first failure aborts the
    whole run; invoices finalized earlier stay finalized.
    """

    def __init__(self, client: FastbillClient, *, today: Callable[[], date] = date.today) -> None:
        self.client = client
        self._today = today

    async def run(self, invoices: Sequence[Invoice]) -> List[str]:
        """Finalize ``invoices`` strictly in order; return the finalized invoice ids.

        Raises FinalizationAbortedError chained to the first error encountered.
        """
        finalized: List[str] = []
        logger.info("Billing run started for %d invoice(s)", len(invoices))
        for invoice in invoices:
            state = FinalizationStep.DRAFT
            try:
                async for state in self._finalize(invoice):
                    logger.debug("[%s] %s", invoice.invoice_id, state.value)
            except Exception as exc:
                step = _NEXT_STEP.get(state, state.value)
                logger.error("[%s] %s at %s: %s", invoice.invoice_id, FinalizationStep.FAILED.value, step, exc)
                raise FinalizationAbortedError(invoice.invoice_id, step, exc, finalized) from exc
            finalized.append(invoice.invoice_id)
            logger.info("[%s] finalized", invoice.invoice_id)
        logger.info("Billing run finished: %d invoice(s) finalized", len(finalized))
        return finalized

    async def _finalize(self, invoice: Invoice):
        """Drive one invoice through its states, yielding each state once reached."""
        invoice_id = invoice.invoice_id
        if not invoice.customer_id:
            raise NotFoundError(f"Invoice {invoice_id} has no customer")
        yield FinalizationStep.VALIDATED

        await self.client.update_invoice(invoice_id, {"INVOICE_DATE": self._today().isoformat()})
        yield FinalizationStep.DATED

        await self.client.complete_invoice(invoice_id)
        yield FinalizationStep.COMPLETED

        # Independent reads against different resources; both settle before
        # the first error is raised so no request outlives the run
        results = await asyncio.gather(
            self.client.get_customer(invoice.customer_id),
            self.client.list_invoices({"INVOICE_ID": invoice_id}),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        customer, refreshed = results
        if not refreshed:
            raise NotFoundError(f"Invoice {invoice_id} not found after completion")
        service_start = refreshed[0].service_period_start
        if service_start is None:
            raise NotFoundError(f"Invoice {invoice_id} has no service period start")
        if not customer.email:
            raise NotFoundError(f"Customer {customer.customer_id} has no e-mail address")
        yield FinalizationStep.REFRESHED

        await self.client.send_invoice_email(invoice_id, customer.email, service_start)
        yield FinalizationStep.EMAILED
