"""
fingerprint.py

Stable narration fingerprint for recurring detection.

Dates, long reference numbers, masked account numbers and alphanumeric
transaction ids change between occurrences of the same payment; they are
stripped before hashing so that

    "ACH D STAFF LOAN EMI REC 12/01/2024 A54152"
    "ACH D STAFF LOAN EMI REC 12/02/2024 A61877"

share one fingerprint.
"""

from __future__ import annotations

import hashlib
import re

# Order matters: full dates before the shorter numeric patterns, and
# YYYY-MM-DD before DD-MM-YY (which would otherwise eat its tail)
VOLATILE_PATTERNS = [
    r"\d{4}[-/]\d{1,2}[-/]\d{1,2}",       # YYYY-MM-DD
    r"\d{1,2}[-/]\d{1,2}[-/]\d{2,4}",     # DD-MM-YYYY, DD/MM/YY
    r"\d{1,2}[-/]\w{3}[-/]\d{2,4}",       # DD-MMM-YYYY
    r"\w{3}\s+\d{1,2},?\s+\d{4}",         # MMM DD, YYYY
    r"\d{8,}",                            # reference numbers
    r"X{6,}\d{4}",                        # masked account numbers
    r"\b[A-Z]\d{4,}\b",                   # txn ids (A54152, K16675)
]

P_VOLATILE = [re.compile(p) for p in VOLATILE_PATTERNS]
_WS = re.compile(r"\s+")


def normalize_for_fingerprint(narration: str) -> str:
    if not narration:
        return ""
    s = narration.strip().upper()
    for pat in P_VOLATILE:
        s = pat.sub("", s)
    return _WS.sub(" ", s).strip()


def fingerprint(narration: str) -> str:
    """SHA-256 hex of the normalized narration; "" when nothing is left."""
    normalized = normalize_for_fingerprint(narration)
    if not normalized:
        return ""
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def same_fingerprint(a: str, b: str) -> bool:
    fa = fingerprint(a)
    return fa != "" and fa == fingerprint(b)
