"""Pydantic models for FastBill records and API requests/responses."""
from __future__ import annotations

import base64
from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from .utils.dates import parse_provider_date


class Credentials(BaseModel):
    """FastBill account e-mail and API key. Immutable; never persisted."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    account_email: str = Field(..., alias="accountEmail", min_length=1)
    api_key: SecretStr = Field(..., alias="apiKey")

    def basic_token(self) -> str:
        raw = f"{self.account_email}:{self.api_key.get_secret_value()}"
        return base64.b64encode(raw.encode("utf-8")).decode("ascii")


class ProviderRecord(BaseModel):
    """Base for FastBill's flat uppercase records.

    Only the fields the billing run touches are modelled; everything else is
    kept as-is in the model's extras and re-emitted by ``model_dump(by_alias=True)``.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @staticmethod
    def _optional_str(value: Any) -> Optional[str]:
        if value is None:
            return None
        s = str(value).strip()
        return s or None


class Invoice(ProviderRecord):
    """A FastBill invoice snapshot. Read-only: mutations happen remotely."""

    invoice_id: str = Field(..., alias="INVOICE_ID", min_length=1)
    customer_id: Optional[str] = Field(default=None, alias="CUSTOMER_ID")
    type: Optional[str] = Field(default=None, alias="TYPE")
    invoice_number: Optional[str] = Field(default=None, alias="INVOICE_NUMBER")
    invoice_date: Optional[date] = Field(default=None, alias="INVOICE_DATE")
    service_period_start: Optional[date] = Field(default=None, alias="SERVICE_PERIOD_START")
    service_period_end: Optional[date] = Field(default=None, alias="SERVICE_PERIOD_END")
    first_name: Optional[str] = Field(default=None, alias="FIRST_NAME")
    last_name: Optional[str] = Field(default=None, alias="LAST_NAME")
    organization: Optional[str] = Field(default=None, alias="ORGANIZATION")
    total: Optional[float] = Field(default=None, alias="TOTAL")
    currency_code: Optional[str] = Field(default=None, alias="CURRENCY_CODE")

    @field_validator("invoice_id", mode="before")
    @classmethod
    def _coerce_invoice_id(cls, value: Any) -> Any:
        # Ids arrive as strings or numbers depending on the endpoint
        return "" if value is None else str(value).strip()

    @field_validator(
        "customer_id", "type", "invoice_number", "first_name", "last_name", "organization", "currency_code",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return cls._optional_str(value)

    @field_validator("service_period_start", mode="before")
    @classmethod
    def _parse_service_start(cls, value: Any) -> Optional[date]:
        return parse_provider_date(value)

    # Display-only fields: a value we cannot read must not reject the record
    @field_validator("invoice_date", "service_period_end", mode="before")
    @classmethod
    def _parse_display_dates(cls, value: Any) -> Optional[date]:
        try:
            return parse_provider_date(value)
        except ValueError:
            return None

    @field_validator("total", mode="before")
    @classmethod
    def _parse_total(cls, value: Any) -> Optional[float]:
        if isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.organization or ""


class Customer(ProviderRecord):
    """A FastBill customer; the billing run only needs the e-mail address."""

    customer_id: str = Field(..., alias="CUSTOMER_ID")
    email: Optional[str] = Field(default=None, alias="EMAIL")
    first_name: Optional[str] = Field(default=None, alias="FIRST_NAME")
    last_name: Optional[str] = Field(default=None, alias="LAST_NAME")
    organization: Optional[str] = Field(default=None, alias="ORGANIZATION")

    @field_validator("customer_id", mode="before")
    @classmethod
    def _coerce_customer_id(cls, value: Any) -> Any:
        return "" if value is None else str(value).strip()

    @field_validator("email", "first_name", "last_name", "organization", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return cls._optional_str(value)


class DraftInvoicesRequest(BaseModel):
    """Credentials for fetching the current draft invoices."""

    model_config = ConfigDict(populate_by_name=True)

    accountEmail: str = Field(..., min_length=1)
    apiKey: SecretStr

    def credentials(self) -> Credentials:
        return Credentials(account_email=self.accountEmail, api_key=self.apiKey)


class DraftInvoicesResponse(BaseModel):
    """Draft invoices as returned by FastBill (provider field names)."""

    invoices: List[dict]


class FinalizeRequest(DraftInvoicesRequest):
    """Credentials plus the cached draft list to finalize, in order."""

    invoices: List[Invoice]


class FinalizationOutcome(BaseModel):
    """Single terminal outcome of a billing run."""

    ok: bool
    message: str
    finalized: List[str] = Field(default_factory=list, description="Invoice ids completed and emailed")
    failedInvoiceId: Optional[str] = None
    failedStep: Optional[str] = None
