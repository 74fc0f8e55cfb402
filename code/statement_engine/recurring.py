"""
recurring.py

Recurring payment detection over one statement.

Rows are grouped by counterparty signature:
  MERCHANT:<canonical>  (non-generic canonical merchant)
  FINGERPRINT:<sha256>  (narration with dates/refs stripped)
  BENEFICIARY:<name>

Each group of >= 2 rows is scored 0-100 (count, periodicity, amount
stability, keywords, day-of-month, direction, exclusions). >= 50 is a
probable recurring payment and enters the inventory; >= 70 is confirmed.
A second pass marks member rows and rewrites their signature to the entry's.
"""

from __future__ import annotations

import re
from collections import OrderedDict
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .cancellation import CancellationToken, check_cancelled
from .classification.negative import check_transfer
from .classification.normalize import normalize_narration
from .fingerprint import fingerprint, normalize_for_fingerprint
from .logging_setup import get_logger
from .models import Category, ClassifiedTransaction, Method, Rail, RecurringPayment

log = get_logger("statement_engine.recurring")


# ======================================================
# CONFIG
# ======================================================

PROBABLE_CONFIDENCE = 50
CONFIRMED_CONFIDENCE = 70

BASE_SCORE = 30

GENERIC_MERCHANT_WORDS = [
    "UNKNOWN", "MERCHANT", "PAYMENT", "TRANSACTION",
    "BANK", "ATM", "POS", "UPI", "IMPS", "NEFT",
]

RECURRING_KEYWORDS = [
    "EMI", "LOAN", "REPAY", "INSTALLMENT", "INSTALMENT",
    "CC", "BILL",
    "SALARY", "PAYROLL",
    "RENT",
    "SUBSCRIPTION", "NETFLIX", "PRIME", "SPOTIFY",
    "PREMIUM", "INSURANCE",
    "SIP", "NACH", "ECS", "AUTO DEBIT", "AUTODEBIT",
]

# (mean gap window, per-gap window, label)
PERIODS = [
    ((28, 35), (25, 38), "MONTHLY"),
    ((85, 95), (80, 100), "QUARTERLY"),
    ((6, 8), (5, 10), "WEEKLY"),
]

FOOD_DELIVERY_WORDS = ["SWIGGY", "ZOMATO", "UBER EATS"]
FOOD_DELIVERY_VARIANCE = 0.30

DISPLAY_NAME_MAX_LEN = 60
DISPLAY_NAME_WORDS = 5
MIN_CONTAINS_LEN = 4


# ======================================================
# COMPILED PATTERNS (compile once)
# ======================================================

def _kw_pattern(kw: str) -> re.Pattern:
    # Short codes need both boundaries (CC must not fire inside ACCOUNT)
    tail = r"\b" if len(kw) <= 4 else ""
    return re.compile(r"\b" + re.escape(kw).replace(r"\ ", r"\s+") + tail)


P_RECURRING_KW = [_kw_pattern(k) for k in RECURRING_KEYWORDS]
P_SALARY_WORDS = re.compile(r"\b(?:SALARY|PAYROLL)\b")
P_FOOD_SUBSCRIPTION = re.compile(r"\b(?:SUBSCRIPTION|PRO)\b")


# ======================================================
# HELPERS
# ======================================================

def is_generic_merchant(merchant: str) -> bool:
    u = merchant.upper()
    return any(g in u for g in GENERIC_MERCHANT_WORDS)


def has_recurring_keyword(narration: str) -> bool:
    u = (narration or "").upper()
    return any(p.search(u) for p in P_RECURRING_KW)


def counterparty_signature(txn: ClassifiedTransaction) -> str:
    merchant = txn.merchant.strip()
    if merchant and merchant != "Unknown" and not is_generic_merchant(merchant):
        return "MERCHANT:" + merchant.upper()
    fp = fingerprint(txn.narration)
    if fp:
        return "FINGERPRINT:" + fp
    if txn.beneficiary.strip():
        return "BENEFICIARY:" + txn.beneficiary.strip().upper()
    return ""


def _amount(txn: ClassifiedTransaction) -> float:
    return txn.withdrawal if txn.withdrawal > 0 else txn.deposit


def _amounts(txns: Sequence[ClassifiedTransaction]) -> List[float]:
    return [a for a in (_amount(t) for t in txns) if a > 0]


def _max_relative_deviation(amounts: Sequence[float]) -> Optional[float]:
    if len(amounts) < 2:
        return None
    mean = float(np.mean(amounts))
    if mean <= 0:
        return None
    return max(abs(a - mean) / mean for a in amounts)


def is_person_to_person(txn: ClassifiedTransaction) -> bool:
    """UPI/IMPS row to a person-shaped name (salary credits excepted)."""
    if txn.metadata.channel not in (Rail.UPI.value, Rail.IMPS.value):
        return False
    upper = normalize_narration(txn.narration).upper
    if P_SALARY_WORDS.search(upper):
        return False
    if txn.metadata.rule_id.startswith("R15_") or txn.method == Method.SELF_TRANSFER:
        return True
    name = txn.beneficiary if txn.merchant == "Unknown" else txn.merchant
    rail = Rail(txn.metadata.channel)
    return check_transfer(upper, name, txn.withdrawal, rail).is_transfer


# ======================================================
# SCORING
# ======================================================

def _periodicity(txns: Sequence[ClassifiedTransaction]) -> Tuple[int, str]:
    gaps = [
        (txns[i].txn_date - txns[i - 1].txn_date).days
        for i in range(1, len(txns))
    ]
    if not gaps:
        return 0, ""
    mean_gap = float(np.mean(gaps))
    for (lo, hi), (glo, ghi), label in PERIODS:
        if lo <= mean_gap <= hi:
            if all(glo <= g <= ghi for g in gaps):
                return 25, label
            return 20, label
    if float(np.std(gaps)) < 5:
        return 15, "CUSTOM"
    return 0, ""


def _amount_stability(txns: Sequence[ClassifiedTransaction]) -> int:
    dev = _max_relative_deviation(_amounts(txns))
    if dev is None:
        return 0
    if dev <= 0.03:
        return 20
    if dev <= 0.05:
        return 15
    if dev <= 0.10:
        return 10
    return 0


def _keyword_score(txns: Sequence[ClassifiedTransaction]) -> int:
    hits = sum(1 for t in txns if has_recurring_keyword(t.narration))
    if hits == len(txns):
        return 15
    if hits > 0:
        return 10
    return 0


def _day_of_month_score(txns: Sequence[ClassifiedTransaction]) -> int:
    days = [t.txn_date.day for t in txns]
    if len(days) < 2:
        return 0
    mean_day = sum(days) // len(days)
    return 10 if all(abs(d - mean_day) <= 2 for d in days) else 0


def _same_direction(txns: Sequence[ClassifiedTransaction]) -> bool:
    first = txns[0].is_debit
    return all(t.is_debit == first for t in txns)


def _should_exclude(txns: Sequence[ClassifiedTransaction]) -> bool:
    high_variance: Optional[bool] = None
    for t in txns:
        if is_person_to_person(t):
            return True
        upper = t.narration.upper()
        if any(w in upper for w in FOOD_DELIVERY_WORDS) and not P_FOOD_SUBSCRIPTION.search(upper):
            if high_variance is None:
                dev = _max_relative_deviation(_amounts(txns))
                high_variance = dev is not None and dev > FOOD_DELIVERY_VARIANCE
            if high_variance:
                return True
    return False


def score_group(txns: Sequence[ClassifiedTransaction]) -> Tuple[int, str]:
    """
    Confidence (0-100) and frequency label for one signature group.

    `txns` must be sorted by date.
    """
    count = len(txns)
    if count < 2:
        return 0, ""

    score = BASE_SCORE
    if count >= 3:
        score += 10
    elif any(has_recurring_keyword(t.narration) for t in txns):
        score += 5
    else:
        return 0, ""

    periodicity, frequency = _periodicity(txns)
    score += periodicity
    score += _amount_stability(txns)
    score += _keyword_score(txns)
    score += _day_of_month_score(txns)
    if _same_direction(txns):
        score += 5

    if _should_exclude(txns):
        score = 0

    return max(0, min(100, score)), frequency


def display_name(txns: Sequence[ClassifiedTransaction]) -> str:
    for t in txns:
        m = t.merchant.strip()
        if m and m != "Unknown" and not is_generic_merchant(m):
            return m
    for t in txns:
        if t.beneficiary.strip():
            return t.beneficiary.strip()
    normalized = normalize_for_fingerprint(txns[0].narration)
    if normalized:
        if len(normalized) > DISPLAY_NAME_MAX_LEN:
            return " ".join(normalized.split()[:DISPLAY_NAME_WORDS])
        return normalized
    first = txns[0]
    if first.category != Category.OTHER:
        return f"{first.category.value} Payment"
    if first.method != Method.OTHER:
        return f"{first.method.value} Payment"
    return "Recurring Payment"


# ======================================================
# DETECTION
# ======================================================

def group_by_signature(
    txns: Sequence[ClassifiedTransaction],
) -> "OrderedDict[str, List[ClassifiedTransaction]]":
    groups: "OrderedDict[str, List[ClassifiedTransaction]]" = OrderedDict()
    for t in txns:
        if t.withdrawal == 0 and t.deposit == 0:
            continue
        sig = counterparty_signature(t)
        if not sig:
            continue
        groups.setdefault(sig, []).append(t)
    return groups


def detect_recurring(
    txns: Sequence[ClassifiedTransaction],
    token: Optional[CancellationToken] = None,
) -> List[RecurringPayment]:
    """Recurring inventory, confidence descending (signature breaks ties)."""
    check_cancelled(token, "recurring")
    inventory: List[RecurringPayment] = []
    for sig, members in group_by_signature(txns).items():
        if len(members) < 2:
            continue
        ordered = sorted(members, key=lambda t: (t.txn_date, t.index))
        confidence, frequency = score_group(ordered)
        if confidence < PROBABLE_CONFIDENCE:
            continue
        amounts = _amounts(ordered)
        inventory.append(RecurringPayment(
            name=display_name(ordered),
            amount=float(np.mean(amounts)) if amounts else 0.0,
            day_of_month=sum(t.txn_date.day for t in ordered) // len(ordered),
            pattern=frequency,
            confidence=confidence,
            frequency=frequency,
            first_seen=ordered[0].date,
            last_seen=ordered[-1].date,
            count=len(ordered),
            signature=sig,
            member_indices=tuple(t.index for t in ordered),
        ))
    inventory.sort(key=lambda r: (-r.confidence, r.signature))
    log.debug("recurring inventory: %d entries", len(inventory))
    return inventory


def _fallback_entry(
    txn: ClassifiedTransaction, inventory: Sequence[RecurringPayment]
) -> Optional[RecurringPayment]:
    if is_person_to_person(txn):
        return None
    merchant = txn.merchant.upper() if txn.merchant != "Unknown" else ""
    beneficiary = txn.beneficiary.upper()
    fp = fingerprint(txn.narration)
    for rp in inventory:
        name = rp.name.upper()
        if len(merchant) >= MIN_CONTAINS_LEN and merchant in name:
            return rp
        if len(beneficiary) >= MIN_CONTAINS_LEN and beneficiary in name:
            return rp
        if fp and fp == fingerprint(rp.name):
            return rp
    return None


def mark_recurring(
    txns: Sequence[ClassifiedTransaction],
    inventory: Sequence[RecurringPayment],
    token: Optional[CancellationToken] = None,
) -> List[ClassifiedTransaction]:
    """
    Second pass: flag rows that belong to an inventory entry.

    Primary lookup is by signature; the contains/fingerprint fallback runs
    only on a miss. Matched rows take the entry's signature.
    """
    check_cancelled(token, "recurring")
    by_signature: Dict[str, RecurringPayment] = {rp.signature: rp for rp in inventory}
    out: List[ClassifiedTransaction] = []
    for t in txns:
        sig = counterparty_signature(t)
        rp = by_signature.get(sig)
        if rp is None and inventory:
            rp = _fallback_entry(t, inventory)
        if rp is None:
            out.append(replace(t, signature=sig))
            continue
        out.append(replace(
            t,
            signature=rp.signature,
            is_recurring=True,
            recurring=rp.metadata(),
        ))
    return out
