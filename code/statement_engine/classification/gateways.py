"""
gateways.py

Payment gateway and wallet extraction.

A gateway (BillDesk, Razorpay, ...) is the aggregator that routed a payment;
a wallet (Paytm, PhonePe, ...) is the app that funded it. Neither is the rail,
and both are reported separately in classificationMetadata.
"""

from __future__ import annotations

from typing import List, Tuple

from .normalize import compile_patterns, has_any


# Most specific first: BBPS bill payments are often routed through BillDesk
GATEWAY_PATTERNS: List[Tuple[str, List[str]]] = [
    ("BBPS", [r"\bBBPS\b", r"\bBHARAT\s*BILL\s*PAY"]),
    ("BillDesk", [r"\bWHDF\b", r"\bBILLDK", r"\bBILLDESK\b"]),
    ("CCAvenue", [r"\bCCAVENUE\b", r"\bCC\s*AVENUE\b", r"\bAVENUES\s+INDIA\b"]),
    ("Razorpay", [r"\bRAZP", r"\bRAZORPAY\b"]),
    ("PayU", [r"\bPAYU\b", r"\bPAYUPAYMENTS\b"]),
    ("Cashfree", [r"\bCASHFREE\b", r"\bCFPG\b"]),
    ("Paytm Payment Gateway", [r"\bPAYTM\s*PG\b", r"\bPAYTMPG\b"]),
]

WALLET_PATTERNS: List[Tuple[str, List[str]]] = [
    ("Mobikwik", [r"\bMOBIKWIK\b"]),
    ("Paytm", [r"\bPAYTM", r"@PAYTM\b", r"@PTYES\b"]),
    ("PhonePe", [r"\bPHONEPE\b", r"@YBL\b", r"@IBL\b", r"@AXL\b"]),
    ("GooglePay", [r"\bGPAY\b", r"\bGOOGLEPAY\b", r"\bGOOGLE\s+PAY\b", r"@OK(?:HDFCBANK|ICICI|SBI|AXIS)\b"]),
    ("AmazonPay", [r"\bAMAZONPAY\b", r"\bAMAZON\s+PAY\b", r"@APL\b"]),
    ("Freecharge", [r"\bFREECHARGE\b"]),
    ("JioMoney", [r"\bJIOMONEY\b", r"\bJIO\s+MONEY\b"]),
]

P_GATEWAYS = [(name, compile_patterns(pats)) for name, pats in GATEWAY_PATTERNS]
P_WALLETS = [(name, compile_patterns(pats)) for name, pats in WALLET_PATTERNS]

BILL_GATEWAYS = frozenset({"BBPS", "BillDesk"})


def detect_gateway(upper: str) -> str:
    for name, patterns in P_GATEWAYS:
        if has_any(upper, patterns):
            return name
    return ""


def detect_wallet(upper: str) -> str:
    for name, patterns in P_WALLETS:
        if has_any(upper, patterns):
            return name
    return ""
