from __future__ import annotations

"""Domain-specific exceptions for the FastBill client and the billing run.

Routers should catch these and translate them to appropriate HTTP responses.
"""

from typing import List, Optional, Sequence


class InvoicingError(Exception):
    """Base class for every failure raised while talking to the invoicing provider."""


class TransportError(InvoicingError):
    """Non-2xx HTTP status, network failure, or an undecodable response body."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteApplicationError(InvoicingError):
    """The provider answered with a non-empty ERRORS list."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors: List[str] = [str(e) for e in errors]
        super().__init__(" | ".join(self.errors))


class OperationFailedError(InvoicingError):
    """2xx response without errors whose STATUS is not "success" (business-rule rejection)."""

    def __init__(self, operation: str, status: Optional[str] = None) -> None:
        self.operation = operation
        self.status = status
        super().__init__(f"Failed to {operation}")


class NotFoundError(InvoicingError):
    """An expected related entity (customer, refreshed invoice, address) is absent (maps to HTTP 404)."""


class FinalizationAbortedError(InvoicingError):
    """A billing run stopped at the first failing invoice.

    Invoices listed in ``finalized`` were completed and emailed before the
    failure and are not rolled back.
    """

    def __init__(
        self,
        invoice_id: str,
        step: str,
        cause: Exception,
        finalized: Optional[Sequence[str]] = None,
    ) -> None:
        self.invoice_id = invoice_id
        self.step = step
        self.cause = cause
        self.finalized: List[str] = list(finalized or [])
        super().__init__(f"Invoice {invoice_id} failed at {step}: {cause}")
