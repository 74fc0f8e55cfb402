"""
negative.py

Negative classification: transfers between people (or between the customer's
own accounts) are not spend with a merchant, whatever keywords the narration
carries.

Checks:
- explicit FUND(S) TRANSFER / SELF TRANSFER / TO SELF phrasing
- counterparty name shaped like a person (2-4 words, no digits, no business word)
- large IMPS/UPI payments to such a name
- counterparty name matching the account holder
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from ..models import Rail
from .normalize import compile_patterns, first_match


TRANSFER_PHRASES = [
    r"\bFUNDS?\s+TRANSFER\b",
    r"\bSELF\s+TRANSFER\b",
    r"\bTO\s+SELF\b",
]

BUSINESS_KEYWORDS = [
    "PVT", "LTD", "LIMITED", "LLP", "INC", "CORP", "COMPANY", "COMP",
    "STORE", "SHOP", "MARKET", "TRADERS", "TRADING", "ENTERPRISE", "ENTERPRISES",
    "SERVICES", "SERVICE", "SOLUTIONS", "SOL", "TECHNOLOGIES", "TECH",
    "HOTEL", "RESTAURANT", "CAFE", "BAKERY", "PHARMACY", "MEDICAL",
    "HOSPITAL", "CLINIC", "BANK", "FINANCE", "FINSERV",
]

NAME_TITLES = ("MR.", "MR ", "MRS.", "MRS ", "MS.", "MS ", "DR.", "DR ", "PROF.", "PROF ")
NAME_FILLER_WORDS = frozenset({"AND", "THE", "OF", "TO", "FOR"})

PERSON_MIN_WORDS = 2
PERSON_MAX_WORDS = 4
LARGE_P2P_AMOUNT = 10000.0

P_TRANSFER = compile_patterns(TRANSFER_PHRASES)
P_BUSINESS = re.compile(r"\b(?:" + "|".join(BUSINESS_KEYWORDS) + r")\b")
_DIGIT = re.compile(r"\d")


@dataclass(frozen=True)
class TransferVerdict:
    is_transfer: bool
    reason: str = ""
    keyword: str = ""


NOT_TRANSFER = TransferVerdict(False)


def has_business_keyword(name: str) -> bool:
    return bool(P_BUSINESS.search(name.upper()))


def looks_like_person(name: str) -> bool:
    """2-4 whitespace words, digit-free, not UNKNOWN, no business keyword."""
    upper = (name or "").upper().strip()
    if not upper or upper == "UNKNOWN":
        return False
    if _DIGIT.search(upper) or has_business_keyword(upper):
        return False
    return PERSON_MIN_WORDS <= len(upper.split()) <= PERSON_MAX_WORDS


# ======================================================
# NAME MATCHING
# ======================================================

def _strip_title(name: str) -> str:
    name = name.strip().upper()
    for prefix in NAME_TITLES:
        if name.startswith(prefix):
            return name[len(prefix):].strip()
    return name


def _name_words(name: str) -> List[str]:
    return [w for w in _strip_title(name).split() if w not in NAME_FILLER_WORDS and len(w) > 1]


def match_names(name1: str, name2: str) -> bool:
    """
    True when every word of the shorter name occurs in the longer one.

    "RAHUL SHARMA" matches "MR RAHUL KUMAR SHARMA"; word order is ignored.
    """
    if not name1 or not name2:
        return False
    words1 = _name_words(name1)
    words2 = _name_words(name2)
    if not words1 or not words2:
        return False
    shorter, longer = (words1, words2) if len(words1) <= len(words2) else (words2, words1)
    longer_set = set(longer)
    return all(w in longer_set for w in shorter)


# ======================================================
# FILTER
# ======================================================

def check_transfer(
    upper: str,
    name: str,
    amount: float,
    rail: Rail,
    customer_name: str = "",
) -> TransferVerdict:
    """
    Decide whether a row is a person-to-person or own-account transfer.

    `name` is the counterparty as extracted from the narration (beneficiary,
    or the raw merchant label when no canonical merchant matched); pass "" to
    test only the explicit phrases.
    """
    phrase = first_match(upper, P_TRANSFER)
    if phrase:
        return TransferVerdict(True, f"explicit transfer phrase '{phrase}'", phrase)

    if not name:
        return NOT_TRANSFER

    if customer_name and match_names(name, customer_name):
        return TransferVerdict(True, f"counterparty '{name}' matches account holder", "SELF_TRANSFER")

    if looks_like_person(name):
        if amount >= LARGE_P2P_AMOUNT and rail in (Rail.IMPS, Rail.UPI):
            return TransferVerdict(
                True, f"large {rail.value} transfer to person '{name}'", "P2P_LARGE"
            )
        return TransferVerdict(True, f"counterparty '{name}' looks like a person", "P2P")

    return NOT_TRANSFER
