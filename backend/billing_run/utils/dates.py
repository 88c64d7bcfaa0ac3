from __future__ import annotations

from datetime import date, datetime
from typing import Optional

GERMAN_MONTHS = (
    "Januar",
    "Februar",
    "März",
    "April",
    "Mai",
    "Juni",
    "Juli",
    "August",
    "September",
    "Oktober",
    "November",
    "Dezember",
)

# FastBill reports unset dates as an all-zero timestamp
_ZERO_DATES = {"", "0000-00-00", "0000-00-00 00:00:00"}


def german_month_name(value: date) -> str:
    """Full German month name, independent of the process locale."""
    return GERMAN_MONTHS[value.month - 1]


def parse_provider_date(value: str | date | None) -> Optional[date]:
    """Parse a FastBill date field.

    Accepts ``YYYY-MM-DD HH:MM:SS`` and ``YYYY-MM-DD``; the provider's zero
    date and empty values read as ``None``. Raises ValueError otherwise.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if s in _ZERO_DATES:
        return None
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date format: {value!r}")
