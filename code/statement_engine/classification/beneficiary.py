"""
beneficiary.py

Beneficiary (payee / payer) extraction from bank narration layouts.

Layouts handled:
- IMPS-REF-MR  NAME-BANK-ACCOUNT-PURPOSE
- RTGS CR-IFSC-NAME-NAME-REF
- NEFT/IMPS generic: RAIL-REF-NAME-IFSC4...
- UPI-NAME-VPA@BANK-REF-UPI (name, else VPA handle)
- P:REF <EMPLOYER> BANK SALARY FOR <MONTH>
- EMI/LOAN FOR <LENDER>
- ACH D- <MERCHANT>-REF
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from ..models import Rail

MAX_NAME_LEN = 50

# IMPS / NEFT / RTGS
_P_TITLED = re.compile(
    r"(?:IMPS|NEFT|RTGS)\s*(?:CR|DR)?[- ]+(?:[^-]+-)?(?:MRS\.?|MR\.?|MS\.?)\s+([A-Z\s]+?)"
    r"(?:-|@|$|BANK|SBIN|HDFC|ICICI|AXIS|PNB|SBI|PUNB)"
)
_P_RTGS = re.compile(r"RTGS\s*(?:CR|DR)[- ]+[A-Z0-9]+-([A-Z\s]+?)-[A-Z\s]+")
_P_TRANSFER_GENERIC = re.compile(r"(?:IMPS|NEFT|RTGS)\s*(?:CR|DR)?[- ]+[^-]+-([A-Z\s]+?)-[A-Z]{4}")

# UPI
_P_UPI_NAME = re.compile(r"UPI-([^-@]+?)(?:-|@|$)")
_P_UPI_VPA = re.compile(r"([^@\s\-]+)@")
_P_UPI_QR = re.compile(r"UPI-([^-]+)-PAYTMQR")

# Salary
_P_BANK_SALARY = re.compile(r"(?:P:[A-Z0-9]+\s+)?([A-Z\s]+?)\s+BANK\s+SALARY")
_P_SALARY_FROM = re.compile(r"(?:SALARY|SAL)\s+(?:FOR|FROM)\s+([A-Z\s]+)")

# EMI / loan
_P_EMI_FOR = re.compile(r"(?:EMI|LOAN|INSTALLMENT)\s+(?:FOR|OF)\s+([A-Z\s]+)")
LOAN_PROVIDERS = [
    "HDFC", "SBI", "ICICI", "AXIS", "PNB", "BOI",
    "HOME LOAN", "PERSONAL LOAN", "CAR LOAN",
]
_P_EMI_HINT = re.compile(r"\b(?:EMI|LOAN)\b")

# ACH
_P_ACH_MERCHANT = re.compile(
    r"ACH\s*(?:CR|DR|C|D)[-\s]+([A-Z\s]+?)(?:-|LIMITED|LTD|PVT|PRIVATE|INSURA|SECURITIES)"
)
_P_ACH_FALLBACK = re.compile(r"ACH\s*(?:CR|DR|C|D)[-\s]+([A-Z\s]+?)(?:-|$)")

_TITLE_PREFIXES = ("MR ", "MRS ", "MS ")


def _ok(name: str) -> Optional[str]:
    name = name.strip().rstrip("-").strip()
    if 0 < len(name) < MAX_NAME_LEN:
        return name
    return None


def _group(pattern: re.Pattern, text: str) -> Optional[str]:
    m = pattern.search(text)
    return _ok(m.group(1)) if m else None


def _from_bank_transfer(upper: str, rail: Rail) -> Optional[str]:
    name = _group(_P_TITLED, upper)
    if name:
        return name
    if rail == Rail.RTGS:
        name = _group(_P_RTGS, upper)
        if name:
            return name
    m = _P_TRANSFER_GENERIC.search(upper)
    if m:
        name = m.group(1).strip()
        for prefix in _TITLE_PREFIXES:
            if name.startswith(prefix):
                name = name[len(prefix):]
                break
        return _ok(name)
    return None


def upi_details(upper: str) -> Tuple[str, str]:
    """(name, vpa handle) from a UPI narration; either may be ""."""
    name = ""
    m = _P_UPI_NAME.search(upper)
    if m:
        name = m.group(1).strip().rstrip("-").strip()
    handle = ""
    m = _P_UPI_VPA.search(upper)
    if m:
        handle = m.group(1).strip()
        if handle.startswith("PAYTMQR") and not name:
            qr = _P_UPI_QR.search(upper)
            if qr:
                name = qr.group(1).strip()
    return name, handle


def _from_salary(upper: str) -> Optional[str]:
    m = _P_BANK_SALARY.search(upper)
    if m and m.group(1).strip():
        return m.group(1).strip() + " BANK"
    return _group(_P_SALARY_FROM, upper)


def _from_emi(upper: str) -> Optional[str]:
    name = _group(_P_EMI_FOR, upper)
    if name:
        return name
    for provider in LOAN_PROVIDERS:
        if provider in upper:
            return provider
    return None


def _from_ach(upper: str) -> Optional[str]:
    m = _P_ACH_MERCHANT.search(upper)
    if m:
        name = m.group(1).strip()
        if name.startswith("TP ACH "):
            name = name[len("TP ACH "):]
        name = _ok(name)
        if name:
            return name
    return _group(_P_ACH_FALLBACK, upper)


def extract_beneficiary(upper: str, rail: Rail) -> str:
    """
    Best-effort payee/payer name, "" when the layout is not recognised.

    `upper` must keep punctuation: the layouts are '-' and '@' delimited.
    """
    upper = upper.strip()
    if not upper:
        return ""

    if rail in (Rail.IMPS, Rail.NEFT, Rail.RTGS):
        name = _from_bank_transfer(upper, rail)
        if name:
            return name

    if rail == Rail.UPI:
        name, handle = upi_details(upper)
        if name or handle:
            return name or handle

    if "SALARY" in upper:
        name = _from_salary(upper)
        if name:
            return name

    if rail in (Rail.ACH, Rail.NACH, Rail.ECS) and _P_EMI_HINT.search(upper):
        return _from_emi(upper) or ""

    if rail == Rail.ACH:
        return _from_ach(upper) or ""

    return ""
