"""
fraud.py

Fraud-risk alerts and big-ticket movements.

Known-legitimate payees never raise an alert: whitelisted merchant names
(brokers, clearing corporations, banks, insurers, crypto exchanges, deposit
and tax keywords), whitelisted categories and investment methods.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from ..models import INCOME_CATEGORIES, INCOME_METHODS, Category, ClassifiedTransaction, Method

WHITELISTED_MERCHANTS = [
    # brokers / depositories
    "ZERODHA", "ZERODHA BROKING", "GROWW", "UPSTOX", "COIN", "KITE",
    "ANGEL BROKING", "ICICI SECURITIES", "HDFC SECURITIES", "KOTAK SECURITIES",
    "SHAREKHAN", "MOTILAL OSWAL", "IIFL", "5PAISA",
    "INDIAN CLEARING CORPORATION", "NSDL", "CDSL",
    # banks
    "HDFC BANK", "ICICI BANK", "SBI", "AXIS BANK", "KOTAK", "IDFC",
    # insurers
    "LIC", "HDFC LIFE", "ICICI PRUDENTIAL", "SBI LIFE", "MAXLIFE", "BAJAJ ALLIANZ",
    # crypto exchanges
    "WAZIRX", "COINDCX", "COINSWITCH", "ZEBPAY",
    # deposits / funds
    "SIP", "MUTUAL FUND", "RD", "FD",
    # tax
    "INCOMETAX", "GST", "PAYGOV",
]

WHITELISTED_CATEGORIES = frozenset({
    Category.INVESTMENT,
    Category.SELF_TRANSFER,
    Category.INCOME,
    Category.BILLS_UTILITIES,
    Category.LOAN,
})

WHITELISTED_METHODS = frozenset({
    Method.SELF_TRANSFER,
    Method.INVESTMENT,
    Method.RD,
    Method.FD,
    Method.SIP,
})

MAX_ALERTS = 5
HIGH_RISK_ALERTS = 3
UNKNOWN_VENDOR = "Unknown Vendor"
DESCRIPTION_MAX_LEN = 50

# Short codes (RD, FD, SIP, LIC) must stand alone in free text
P_WHITELIST_NARRATION = re.compile(
    r"\b(?:" + "|".join(re.escape(w) for w in WHITELISTED_MERCHANTS) + r")\b"
)


def is_whitelisted(txn: ClassifiedTransaction) -> bool:
    if txn.category in WHITELISTED_CATEGORIES or txn.method in WHITELISTED_METHODS:
        return True
    merchant = txn.merchant.upper()
    if merchant != "UNKNOWN" and any(w in merchant for w in WHITELISTED_MERCHANTS):
        return True
    return P_WHITELIST_NARRATION.search(txn.narration.upper()) is not None


@dataclass(frozen=True)
class FraudRisk:
    risk_level: str = "Low"
    recent_alerts: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"riskLevel": self.risk_level, "recentAlerts": list(self.recent_alerts)}


def fraud_risk(
    txns: Sequence[ClassifiedTransaction],
    alert_threshold: float = 50000.0,
    high_value_threshold: float = 100000.0,
    unknown_vendor_threshold: float = 10000.0,
) -> FraudRisk:
    risk = "Low"
    alerts: List[Dict[str, Any]] = []
    for t in txns:
        if not t.is_debit or is_whitelisted(t):
            continue
        amount = t.debit_amount
        if amount > alert_threshold:
            alerts.append({"amount": round(amount, 2), "merchant": t.merchant, "date": t.date})
            if amount > high_value_threshold:
                risk = "Medium"
        if t.merchant in ("", "Unknown") and amount > unknown_vendor_threshold:
            alerts.append({"amount": round(amount, 2), "merchant": UNKNOWN_VENDOR, "date": t.date})

    alerts = alerts[:MAX_ALERTS]
    if len(alerts) > HIGH_RISK_ALERTS:
        risk = "High"
    return FraudRisk(risk_level=risk, recent_alerts=alerts)


def _description(t: ClassifiedTransaction) -> str:
    if t.merchant and t.merchant != "Unknown":
        return t.merchant
    if t.beneficiary:
        return t.beneficiary
    text = t.narration.strip()
    return text[:DESCRIPTION_MAX_LEN] + "..." if len(text) > DESCRIPTION_MAX_LEN else text


def big_ticket_movements(
    txns: Sequence[ClassifiedTransaction], threshold: float = 20000.0
) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for t in txns:
        if t.method in INCOME_METHODS or t.category in INCOME_CATEGORIES:
            continue
        amount = t.raw.amount
        if amount <= 0 or amount < threshold:
            continue
        if amount >= threshold * 2:
            impact = "High Impact"
        elif amount >= threshold * 1.5:
            impact = "Medium Impact"
        else:
            impact = "Low Impact"
        out.append({
            "description": _description(t),
            "amount": round(amount, 2),
            "date": t.date,
            "type": "Credit" if t.is_credit else "Debit",
            "category": t.category.value,
            "impact": impact,
        })
    return out
