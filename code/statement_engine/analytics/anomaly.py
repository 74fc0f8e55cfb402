"""
anomaly.py

Statistical anomaly detection over the debit rows of one statement.

The spending profile is built once from every debit row and then frozen;
the detectors only read it. Detectors, per debit row:

  unusual_amount        category profile (>= 5 rows): Z-score, P95/P99, IQR
  unusual_merchant      rare merchant with a large amount vs avg daily spend
  duplicate_payment     same amount + counterparty in the previous 20 rows
  round_amount_pattern  large round amount to an unclassified payee
  spending_spike        single debit > 2x the typical 3-day spend

Risk score (0-100): sum(score * severity weight) / (N * 4) * 100, boosted
x1.5 when more than 10% of checked rows are anomalous.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..cancellation import CancellationToken, check_cancelled
from ..logging_setup import get_logger
from ..models import Category, ClassifiedTransaction

log = get_logger("statement_engine.analytics.anomaly")


# ======================================================
# CONFIG
# ======================================================

MIN_CATEGORY_ROWS = 5
DUPLICATE_LOOKBACK = 20

SEVERITY_WEIGHTS = {"critical": 4.0, "high": 3.0, "medium": 2.0, "low": 1.0}
MAX_SEVERITY_WEIGHT = 4.0
HIGH_ANOMALY_RATE = 0.10
RATE_BOOST = 1.5

ROUND_MIN_AMOUNT = 25000
# (minimum amount, divisor, label)
ROUND_RULES = [
    (10000, 1000, "exact_thousand"),
    (50000, 10000, "exact_ten_thousand"),
    (100000, 100000, "exact_lakh"),
]
SUSPICIOUS_CATEGORIES = {Category.OTHER}


# ======================================================
# PROFILE
# ======================================================

@dataclass(frozen=True)
class CategoryProfile:
    count: int
    mean: float
    median: float
    std_dev: float
    minimum: float
    maximum: float
    q1: float
    q3: float
    iqr: float
    p95: float
    p99: float

    @property
    def upper_fence(self) -> float:
        return self.q3 + 1.5 * self.iqr

    @property
    def lower_fence(self) -> float:
        return self.q1 - 1.5 * self.iqr

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "mean": round(self.mean, 2),
            "median": round(self.median, 2),
            "stdDev": round(self.std_dev, 2),
            "min": round(self.minimum, 2),
            "max": round(self.maximum, 2),
            "q1": round(self.q1, 2),
            "q3": round(self.q3, 2),
            "iqr": round(self.iqr, 2),
            "p95": round(self.p95, 2),
            "p99": round(self.p99, 2),
        }


@dataclass(frozen=True)
class SpendingProfile:
    category_profiles: Dict[str, CategoryProfile]
    merchant_frequency: Dict[str, int]
    avg_daily_spend: float
    avg_weekly_spend: float
    transaction_days: int
    total_transactions: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categoryProfiles": {k: v.to_dict() for k, v in sorted(self.category_profiles.items())},
            "merchantFrequency": dict(sorted(self.merchant_frequency.items())),
            "avgDailySpend": round(self.avg_daily_spend, 2),
            "avgWeeklySpend": round(self.avg_weekly_spend, 2),
            "transactionDays": self.transaction_days,
            "totalTransactions": self.total_transactions,
        }


def category_profile(values: Sequence[float]) -> CategoryProfile:
    a = np.asarray(values, dtype=float)
    q1, median, q3, p95, p99 = np.percentile(a, [25, 50, 75, 95, 99], method="inverted_cdf")
    return CategoryProfile(
        count=int(a.size),
        mean=float(a.mean()),
        median=float(np.median(a)),
        std_dev=float(a.std(ddof=0)),
        minimum=float(a.min()),
        maximum=float(a.max()),
        q1=float(q1),
        q3=float(q3),
        iqr=float(q3 - q1),
        p95=float(p95),
        p99=float(p99),
    )


def _merchant_key(txn: ClassifiedTransaction) -> str:
    m = txn.merchant.strip().upper()
    return "" if m in ("", "UNKNOWN") else m


def transaction_days(txns: Sequence[ClassifiedTransaction]) -> int:
    if len(txns) < 2:
        return 1
    dates = [t.txn_date for t in txns]
    return max((max(dates) - min(dates)).days, 1)


def build_profile(txns: Sequence[ClassifiedTransaction]) -> SpendingProfile:
    by_category: Dict[str, List[float]] = {}
    merchants: Dict[str, int] = {}
    total = 0.0
    count = 0
    for t in txns:
        if t.withdrawal <= 0:
            continue
        by_category.setdefault(t.category.value, []).append(t.withdrawal)
        key = _merchant_key(t)
        if key:
            merchants[key] = merchants.get(key, 0) + 1
        total += t.withdrawal
        count += 1

    days = transaction_days(txns)
    avg_daily = total / days
    return SpendingProfile(
        category_profiles={c: category_profile(v) for c, v in by_category.items()},
        merchant_frequency=merchants,
        avg_daily_spend=avg_daily,
        avg_weekly_spend=avg_daily * 7,
        transaction_days=days,
        total_transactions=count,
    )


# ======================================================
# DETECTORS
# ======================================================

@dataclass(frozen=True)
class AnomalyDetail:
    transaction_index: int
    type: str
    severity: str
    score: float
    description: str
    amount: float
    merchant: str
    category: str
    date: str
    reason: str
    statistical_value: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactionIndex": self.transaction_index,
            "type": self.type,
            "severity": self.severity,
            "score": self.score,
            "description": self.description,
            "amount": round(self.amount, 2),
            "merchant": self.merchant,
            "category": self.category,
            "date": self.date,
            "reason": self.reason,
            "statisticalValue": round(self.statistical_value, 4),
        }


def _anomaly(txn, kind, severity, score, description, reason, value) -> AnomalyDetail:
    return AnomalyDetail(
        transaction_index=txn.index,
        type=kind,
        severity=severity,
        score=score,
        description=description,
        amount=txn.withdrawal,
        merchant=txn.merchant,
        category=txn.category.value,
        date=txn.date,
        reason=reason,
        statistical_value=float(value),
    )


def unusual_amount(txn: ClassifiedTransaction, profile: SpendingProfile) -> Optional[AnomalyDetail]:
    cp = profile.category_profiles.get(txn.category.value)
    if cp is None or cp.count < MIN_CATEGORY_ROWS:
        return None

    amount = txn.withdrawal
    z = (amount - cp.mean) / cp.std_dev if cp.std_dev > 0 else 0.0
    iqr_outlier = amount > cp.upper_fence or amount < cp.lower_fence

    if z > 4 or amount > cp.p99 or amount > 1.5 * cp.upper_fence:
        severity, score = "critical", 0.95
        reason = "Amount exceeds 99th percentile for this category"
    elif z > 3 or amount > cp.p95:
        severity, score = "high", 0.80
        reason = "Amount exceeds 95th percentile for this category"
    elif iqr_outlier or z > 2.5:
        severity, score = "medium", 0.60
        reason = "Amount is significantly above typical range"
    elif z > 2:
        severity, score = "low", 0.40
        reason = "Amount is above average for this category"
    else:
        return None
    return _anomaly(txn, "unusual_amount", severity, score, reason, reason, z)


def unusual_merchant(txn: ClassifiedTransaction, profile: SpendingProfile) -> Optional[AnomalyDetail]:
    key = _merchant_key(txn)
    if not key:
        return None
    # Frequencies include the row itself: 1 = first time, 2 = seen once before
    frequency = profile.merchant_frequency.get(key, 0)
    amount = txn.withdrawal
    if frequency <= 1 and amount > profile.avg_daily_spend * 3:
        return _anomaly(
            txn, "unusual_merchant", "medium", 0.65,
            "First-time merchant with unusually large transaction",
            "Merchant never seen before with amount 3x daily average",
            0,
        )
    if frequency == 2 and amount > profile.avg_daily_spend * 2:
        return _anomaly(
            txn, "unusual_merchant", "low", 0.45,
            "Rare merchant with above-average transaction",
            "Merchant used only once before with amount 2x daily average",
            1,
        )
    return None


def duplicate_payment(
    txns: Sequence[ClassifiedTransaction], pos: int
) -> Optional[AnomalyDetail]:
    txn = txns[pos]
    party = txn.counterparty.strip().upper()
    if not party:
        return None
    for i in range(pos - 1, max(pos - DUPLICATE_LOOKBACK, 0) - 1, -1):
        other = txns[i]
        if other.withdrawal != txn.withdrawal or other.counterparty.strip().upper() != party:
            continue
        gap = abs((txn.txn_date - other.txn_date).days)
        if gap <= 1:
            return _anomaly(
                txn, "duplicate_payment", "high", 0.85,
                "Potential duplicate payment on same day" if gap == 0
                else "Potential duplicate payment within 1 day",
                f"Same amount and merchant as transaction on {other.date}",
                gap,
            )
        if gap <= 3:
            return _anomaly(
                txn, "duplicate_payment", "medium", 0.60,
                "Potential duplicate payment within 3 days",
                f"Same amount and merchant as transaction {gap} days ago",
                gap,
            )
    return None


def round_amount(txn: ClassifiedTransaction) -> Optional[AnomalyDetail]:
    amount = txn.withdrawal
    label = ""
    for minimum, divisor, name in ROUND_RULES:
        if amount >= minimum and amount % divisor == 0:
            label = name
    if not label or amount < ROUND_MIN_AMOUNT or txn.category not in SUSPICIOUS_CATEGORIES:
        return None
    return _anomaly(
        txn, "round_amount_pattern", "medium", 0.55,
        "Large round amount to unclassified payee",
        f"Round amount ({label}) to unclassified category",
        amount,
    )


def spending_spike(txn: ClassifiedTransaction, profile: SpendingProfile) -> Optional[AnomalyDetail]:
    if profile.avg_daily_spend <= 0:
        return None
    expected = profile.avg_daily_spend * 3
    ratio = txn.withdrawal / expected
    if ratio <= 2:
        return None
    return _anomaly(
        txn, "spending_spike", "high", 0.75,
        "Single transaction exceeds 2x typical 3-day spending",
        f"Amount is {ratio:.2f}x your typical 3-day spending",
        ratio,
    )


# ======================================================
# RESULT
# ======================================================

@dataclass(frozen=True)
class AnomalyDetection:
    anomalies: List[AnomalyDetail] = field(default_factory=list)
    total_checked: int = 0
    risk_score: float = 0.0
    by_type: Dict[str, int] = field(default_factory=dict)
    by_severity: Dict[str, int] = field(default_factory=dict)
    top_anomalies: List[AnomalyDetail] = field(default_factory=list)
    profile: Optional[SpendingProfile] = None

    @property
    def anomaly_count(self) -> int:
        return len(self.anomalies)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "anomalies": [a.to_dict() for a in self.anomalies],
            "totalChecked": self.total_checked,
            "anomalyCount": self.anomaly_count,
            "riskScore": self.risk_score,
            "summary": {
                "byType": dict(sorted(self.by_type.items())),
                "bySeverity": dict(sorted(self.by_severity.items())),
                "topAnomalies": [a.to_dict() for a in self.top_anomalies],
            },
            "profile": self.profile.to_dict() if self.profile is not None else None,
        }


def risk_score(anomalies: Sequence[AnomalyDetail], total_checked: int) -> float:
    if not anomalies or total_checked <= 0:
        return 0.0
    weighted = sum(a.score * SEVERITY_WEIGHTS[a.severity] for a in anomalies)
    score = weighted / (len(anomalies) * MAX_SEVERITY_WEIGHT) * 100
    if len(anomalies) / total_checked > HIGH_ANOMALY_RATE:
        score = min(score * RATE_BOOST, 100.0)
    return round(score, 2)


def detect_anomalies(
    txns: Sequence[ClassifiedTransaction],
    min_rows: int = 10,
    top_n: int = 5,
    token: Optional[CancellationToken] = None,
) -> AnomalyDetection:
    if len(txns) < min_rows:
        log.debug("anomaly detection skipped: %d rows < %d", len(txns), min_rows)
        return AnomalyDetection()

    check_cancelled(token, "anomaly profile")
    profile = build_profile(txns)

    check_cancelled(token, "anomaly scoring")
    found: List[AnomalyDetail] = []
    checked = 0
    for pos, t in enumerate(txns):
        if t.withdrawal <= 0:
            continue
        checked += 1
        for hit in (
            unusual_amount(t, profile),
            unusual_merchant(t, profile),
            duplicate_payment(txns, pos),
            round_amount(t),
            spending_spike(t, profile),
        ):
            if hit is not None:
                found.append(hit)

    by_type: Dict[str, int] = {}
    by_severity: Dict[str, int] = {}
    for a in found:
        by_type[a.type] = by_type.get(a.type, 0) + 1
        by_severity[a.severity] = by_severity.get(a.severity, 0) + 1

    top = sorted(found, key=lambda a: -a.score)[:max(top_n, 0)]
    log.debug("anomalies: %d of %d debit rows", len(found), checked)
    return AnomalyDetection(
        anomalies=found,
        total_checked=checked,
        risk_score=risk_score(found, checked),
        by_type=by_type,
        by_severity=by_severity,
        top_anomalies=top,
        profile=profile,
    )
