"""
rails.py

Payment rail (channel) detection.

The rail is the network a payment rode on; it says nothing about economic
meaning. Checks run most specific first and the first hit wins:
POS -> ACH -> NACH -> ECS -> RTGS -> NEFT -> IMPS -> UPI -> NetBanking -> Cheque.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from ..models import Method, Rail
from .normalize import compile_patterns, has_any


RAIL_PATTERNS: List[Tuple[Rail, List[str]]] = [
    (Rail.POS, [r"(?:^|\s)POS[\s\-/]"]),
    (Rail.ACH, [r"\bACH\s*[-/]?\s*(?:DR|CR|D|C)\b", r"\bACH\b"]),
    (Rail.NACH, [r"\bNACH\b"]),
    (Rail.ECS, [r"\bECS\b"]),
    (Rail.RTGS, [r"\bRTGS\b"]),
    (Rail.NEFT, [r"\bNEFT\b"]),
    (Rail.IMPS, [r"\bIMPS\b"]),
    (Rail.UPI, [
        r"\bUPI[\-\s/@]",
        r"\bUPI$",
        r"@(?:YBL|PAYTM|OK\w*|AXL|IBL|PTYES)\b",
        r"\b(?:PAYTM|PHONEPE|GOOGLEPAY|GPAY|BHIM)\b",
    ]),
    (Rail.NET_BANKING, [
        r"(?:^|\s)IB[\s\-/]",
        r"\bNET\s*BANKING\b",
        r"\bFUNDS?\s+TRANSFER\b",
    ]),
    (Rail.CHEQUE, [r"\bCHQ\b", r"\bCHEQUE\b"]),
]

P_RAILS = [(rail, compile_patterns(pats)) for rail, pats in RAIL_PATTERNS]

RAIL_TO_METHOD = {
    Rail.UPI: Method.UPI,
    Rail.IMPS: Method.IMPS,
    Rail.NEFT: Method.NEFT,
    Rail.RTGS: Method.RTGS,
    Rail.ACH: Method.ACH,
    Rail.NACH: Method.NACH,
    Rail.ECS: Method.ECS,
    Rail.POS: Method.DEBIT_CARD,
    Rail.NET_BANKING: Method.NET_BANKING,
    Rail.CHEQUE: Method.CHEQUE,
    Rail.UNKNOWN: Method.OTHER,
}

AUTO_DEBIT_RAILS = frozenset({Rail.ACH, Rail.NACH, Rail.ECS})

_ACH_DEBIT = re.compile(r"\bACH\s*[-/]?\s*DR?\b")


def detect_rail(upper: str) -> Rail:
    for rail, patterns in P_RAILS:
        if has_any(upper, patterns):
            return rail
    return Rail.UNKNOWN


def rail_method(rail: Rail) -> Method:
    return RAIL_TO_METHOD[rail]


def is_ach_debit(upper: str) -> bool:
    return bool(_ACH_DEBIT.search(upper))
