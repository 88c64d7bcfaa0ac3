"""Shared fixtures: a scripted FastBill endpoint behind httpx.MockTransport."""

import json
from datetime import date
from typing import Any, Callable, Dict, List, Union

import httpx
import pytest

from billing_run.config import get_settings
from billing_run.models import Credentials
from billing_run.services.fastbill import FastbillClient

TODAY = date(2026, 10, 19)

Responder = Union[dict, httpx.Response, Callable[[dict], Union[dict, httpx.Response]]]


class FakeFastbill:
    """Records every request body and answers per SERVICE name."""

    def __init__(self) -> None:
        self.calls: List[dict] = []
        self.requests: List[httpx.Request] = []
        self.responders: Dict[str, Responder] = {}

    def on(self, service: str, responder: Responder) -> None:
        self.responders[service] = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        self.requests.append(request)
        responder = self.responders.get(body["SERVICE"])
        if responder is None:
            return httpx.Response(200, json={"RESPONSE": {"ERRORS": [f"unexpected service {body['SERVICE']}"]}})
        if callable(responder):
            responder = responder(body)
        if isinstance(responder, httpx.Response):
            return responder
        return httpx.Response(200, json=responder)

    @property
    def services(self) -> List[str]:
        return [c["SERVICE"] for c in self.calls]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def serve_account(self, invoices: List[Dict[str, Any]], customers: List[Dict[str, Any]]) -> None:
        """Happy-path FastBill: drafts, refresh by id, customers by id, and successful mutations."""

        def invoice_get(body: dict) -> dict:
            flt = body.get("FILTER") or {}
            if "INVOICE_ID" in flt:
                found = [i for i in invoices if i["INVOICE_ID"] == flt["INVOICE_ID"]]
                return {"RESPONSE": {"INVOICES": found}}
            return {"RESPONSE": {"INVOICES": invoices}}

        def customer_get(body: dict) -> dict:
            cid = body["FILTER"]["CUSTOMER_ID"]
            return {"RESPONSE": {"CUSTOMERS": [c for c in customers if c["CUSTOMER_ID"] == cid]}}

        self.on("invoice.get", invoice_get)
        self.on("customer.get", customer_get)
        self.on("invoice.update", {"RESPONSE": {"STATUS": "success"}})
        self.on("invoice.complete", {"RESPONSE": {"STATUS": "success", "INVOICE_NUMBER": "R-1"}})
        self.on("invoice.sendbyemail", {"RESPONSE": {"STATUS": "success"}})


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from the developer's environment and the settings cache."""
    for name in ("FASTBILL_API_URL", "FASTBILL_EMAIL", "FASTBILL_API_KEY", "FASTBILL_TIMEOUT_SECONDS",
                 "DRAFT_INVOICE_TYPE", "EMAIL_SUBJECT_TEMPLATE", "EMAIL_MESSAGE"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def credentials():
    return Credentials(account_email="vorstand@kalk.space", api_key="secret")


@pytest.fixture
def fastbill():
    return FakeFastbill()


@pytest.fixture
def client(credentials, fastbill):
    return FastbillClient(credentials, transport=fastbill.transport())


@pytest.fixture
def draft_invoices():
    return [
        {
            "INVOICE_ID": "42",
            "CUSTOMER_ID": "7",
            "TYPE": "draft",
            "FIRST_NAME": "Ada",
            "LAST_NAME": "Lovelace",
            "INVOICE_DATE": "0000-00-00 00:00:00",
            "SERVICE_PERIOD_START": "2026-09-01 00:00:00",
            "TOTAL": "120.00",
            "ITEMS": [{"DESCRIPTION": "Flex desk"}],
        },
        {
            "INVOICE_ID": "43",
            "CUSTOMER_ID": "8",
            "TYPE": "draft",
            "FIRST_NAME": "Grace",
            "LAST_NAME": "Hopper",
            "SERVICE_PERIOD_START": "2026-09-01",
            "TOTAL": 80,
        },
    ]


@pytest.fixture
def customers():
    return [
        {"CUSTOMER_ID": "7", "EMAIL": "ada@example.org"},
        {"CUSTOMER_ID": "8", "EMAIL": "grace@example.org"},
    ]


@pytest.fixture
def today():
    return TODAY
