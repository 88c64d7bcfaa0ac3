"""FastBill RPC client: one authenticated JSON endpoint, five typed operations.

Async implementation using httpx. Every call is a single POST; nothing is
retried or cached here. Response envelopes are decoded once into a tagged
result so callers never look at the raw ``RESPONSE`` shape.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from ..config import get_settings
from ..exceptions import (
    NotFoundError,
    OperationFailedError,
    RemoteApplicationError,
    TransportError,
)
from ..models import Credentials, Customer, Invoice
from ..utils.dates import german_month_name

logger = logging.getLogger(__name__)

SUCCESS_STATUS = "success"


@dataclass(frozen=True)
class RemoteSuccess:
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RemoteFailure:
    errors: List[str]


RemoteResult = Union[RemoteSuccess, RemoteFailure]


def decode_envelope(body: Any) -> RemoteResult:
    """Turn a decoded ``{"RESPONSE": {...}}`` body into a tagged result.

    A non-empty ``ERRORS`` list always wins over whatever else the payload holds.
    """
    if not isinstance(body, dict):
        raise TransportError("Unexpected response body: expected a JSON object")
    payload = body.get("RESPONSE") or {}
    if not isinstance(payload, dict):
        raise TransportError("Unexpected RESPONSE: expected a JSON object")
    errors = payload.get("ERRORS")
    if errors:
        if isinstance(errors, (str, bytes)):
            errors = [errors]
        return RemoteFailure(errors=[str(e) for e in errors])
    return RemoteSuccess(payload=payload)


def expect_success(payload: Mapping[str, Any], operation: str) -> str:
    """Return the STATUS field, raising OperationFailedError unless it is exactly "success"."""
    status = payload.get("STATUS")
    if status != SUCCESS_STATUS:
        raise OperationFailedError(operation, status if isinstance(status, str) else None)
    return status


class FastbillClient:
    """Authenticated client for the FastBill JSON API.

    Construct a new client whenever credentials change; instances are never
    mutated after creation.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = get_settings()
        self.credentials = credentials
        self.api_url = api_url or self.settings.FASTBILL_API_URL
        self.timeout = timeout if timeout is not None else self.settings.FASTBILL_TIMEOUT_SECONDS
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Basic {self.credentials.basic_token()}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        kwargs: Dict[str, Any] = {}
        if self.timeout is not None:
            kwargs["timeout"] = httpx.Timeout(self.timeout)
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    async def dispatch(self, service: str, parameters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """POST ``{"SERVICE": service, **parameters}`` and return the RESPONSE payload.

        Raises TransportError on non-2xx status, network failure or a body that
        is not a JSON object; RemoteApplicationError when the provider reports
        ERRORS (regardless of HTTP status being 2xx).
        """
        if not service:
            raise ValueError("service name must not be empty")
        request_body: Dict[str, Any] = {"SERVICE": service, **(parameters or {})}

        async with self._client() as client:
            try:
                resp = await client.post(self.api_url, headers=self._headers(), json=request_body)
            except httpx.RequestError as exc:
                logger.error("FastBill %s request failed: %s", service, exc)
                raise TransportError(f"Request to FastBill failed: {exc}") from exc

        if not resp.is_success:
            logger.error("FastBill %s returned HTTP %s", service, resp.status_code)
            raise TransportError(f"Invalid status: {resp.status_code}", status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError as exc:
            raise TransportError("FastBill returned non-JSON body", status_code=resp.status_code) from exc

        result = decode_envelope(body)
        if isinstance(result, RemoteFailure):
            logger.warning("FastBill %s reported errors: %s", service, result.errors)
            raise RemoteApplicationError(result.errors)
        return result.payload

    async def list_invoices(self, filter: Mapping[str, Any]) -> List[Invoice]:
        payload = await self.dispatch("invoice.get", {"FILTER": dict(filter)})
        raw = payload.get("INVOICES") or []
        try:
            return [Invoice.model_validate(item) for item in raw]
        except ValidationError as exc:
            raise TransportError(f"Malformed invoice record: {exc}") from exc

    async def update_invoice(self, invoice_id: str, fields: Mapping[str, Any]) -> None:
        payload = await self.dispatch("invoice.update", {"DATA": {"INVOICE_ID": invoice_id, **fields}})
        expect_success(payload, "update")

    async def complete_invoice(self, invoice_id: str) -> Dict[str, Any]:
        payload = await self.dispatch("invoice.complete", {"DATA": {"INVOICE_ID": invoice_id}})
        expect_success(payload, "complete")
        return payload

    async def send_invoice_email(self, invoice_id: str, recipient: str, reference_date: date) -> str:
        """E-mail the invoice; the subject names the German month of ``reference_date``."""
        subject = self.settings.EMAIL_SUBJECT_TEMPLATE.format(month=german_month_name(reference_date))
        payload = await self.dispatch(
            "invoice.sendbyemail",
            {
                "DATA": {
                    "INVOICE_ID": invoice_id,
                    "RECIPIENT": {"TO": recipient},
                    "SUBJECT": subject,
                    "MESSAGE": self.settings.EMAIL_MESSAGE,
                }
            },
        )
        return expect_success(payload, "sendbyemail")

    async def get_customer(self, customer_id: str) -> Customer:
        payload = await self.dispatch("customer.get", {"FILTER": {"CUSTOMER_ID": customer_id}})
        customers = payload.get("CUSTOMERS") or []
        if not customers:
            raise NotFoundError(f"Customer {customer_id} not found")
        try:
            return Customer.model_validate(customers[0])
        except ValidationError as exc:
            raise TransportError(f"Malformed customer record: {exc}") from exc
