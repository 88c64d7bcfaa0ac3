"""
Run the monthly billing cycle from a terminal.

What it does
- Fetches the account's draft invoices from FastBill and prints them
- Asks for confirmation (unless --yes)
- Dates, completes and e-mails each draft in order, stopping at the first failure

Usage examples
# List drafts only
billing-run --email vorstand@kalk.space --list-only

# Finalize without prompting; API key from FASTBILL_API_KEY
billing-run --yes
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence

from pydantic import ValidationError

from .config import get_settings
from .exceptions import InvoicingError
from .models import Credentials, Invoice
from .services.orchestration.billing_service import BillingRunService

logger = logging.getLogger(__name__)


def format_drafts(invoices: Sequence[Invoice]) -> str:
    """Render drafts as a name / date / total table."""
    rows = [("Name", "Datum", "Betrag")]
    for inv in invoices:
        rows.append((
            inv.display_name,
            inv.invoice_date.isoformat() if inv.invoice_date else "",
            f"{inv.total:.2f}" if inv.total is not None else "",
        ))
    widths = [max(len(r[i]) for r in rows) for i in range(3)]
    return "\n".join(
        f"{r[0]:<{widths[0]}}  {r[1]:<{widths[1]}}  {r[2]:>{widths[2]}}" for r in rows
    )


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Finalize and e-mail FastBill draft invoices")
    parser.add_argument("--email", type=str, default=settings.FASTBILL_EMAIL, help="FastBill account e-mail")
    parser.add_argument("--api-key", type=str, default=settings.FASTBILL_API_KEY, help="FastBill API key (default: FASTBILL_API_KEY)")
    parser.add_argument("--list-only", action="store_true", help="Only print the current drafts")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    return parser


def _confirm(count: int) -> bool:
    answer = input(f"\nFinalize and e-mail {count} invoice(s)? [y/N] ")
    return answer.strip().lower() in ("y", "yes", "j", "ja")


def _run(args: argparse.Namespace, credentials: Credentials, service: BillingRunService) -> int:
    # Each remote phase gets its own event loop; the prompt runs between them
    try:
        invoices = asyncio.run(service.fetch_draft_invoices(credentials))
    except InvoicingError as exc:
        print(f"Fetching drafts failed: {exc}", file=sys.stderr)
        return 1

    if not invoices:
        print("No draft invoices.")
        return 0
    print(format_drafts(invoices))
    if args.list_only:
        return 0

    if not args.yes and not _confirm(len(invoices)):
        print("Aborted.")
        return 1

    outcome = asyncio.run(service.run_finalization(credentials, invoices))
    print(outcome.message, file=sys.stdout if outcome.ok else sys.stderr)
    return 0 if outcome.ok else 1


def main(argv: Optional[List[str]] = None, service: Optional[BillingRunService] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=get_settings().LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.api_key:
        parser.error("an API key is required (--api-key or FASTBILL_API_KEY)")
    try:
        credentials = Credentials(account_email=args.email, api_key=args.api_key)
    except ValidationError:
        parser.error("--email must not be empty")

    return _run(args, credentials, service or BillingRunService())


if __name__ == "__main__":
    sys.exit(main())
