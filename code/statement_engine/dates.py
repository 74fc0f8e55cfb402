"""
dates.py

Date and account helpers shared by classification and analytics.

Accepted statement date layouts (tried in order):
- DD/MM/YY
- DD/MM/YYYY
- YYYY-MM-DD
- DD-MM-YYYY
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

DATE_LAYOUTS = ["%d/%m/%y", "%d/%m/%Y", "%Y-%m-%d", "%d-%m-%Y"]

_YEAR_RE = re.compile(r"\b(19|20)\d{2}\b")


def parse_date(value: object) -> Optional[date]:
    """Return the calendar date for a statement date string, or None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return None
    for layout in DATE_LAYOUTS:
        try:
            return datetime.strptime(s, layout).date()
        except ValueError:
            continue
    return None


def format_date(d: date) -> str:
    return d.strftime("%d/%m/%Y")


def statement_year(statement_period: str) -> str:
    """First four-digit year found in the statement period, else ""."""
    m = _YEAR_RE.search(statement_period or "")
    return m.group(0) if m else ""


def mask_account_number(account_no: str) -> str:
    acct = (account_no or "").strip()
    if len(acct) < 4:
        return "XXXX"
    return "XXXXXX" + acct[-4:]
