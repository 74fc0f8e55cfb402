from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Optional, Sequence

import pandas as pd

from ..dates import format_date
from ..models import ClassifiedTransaction, Method
from .frame import operational, statement_days

PROJECTION_DAYS = 30
NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class PredictiveInsights:
    projected_30_day_spend: float = 0.0
    predicted_low_balance_date: str = NOT_AVAILABLE
    upcoming_emi_impact: float = 0.0
    savings_recommendation: str = ""
    avg_daily_expense: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projected30DaySpend": round(self.projected_30_day_spend, 2),
            "predictedLowBalanceDate": self.predicted_low_balance_date,
            "upcomingEMIImpact": round(self.upcoming_emi_impact, 2),
            "savingsRecommendation": self.savings_recommendation,
            "avgDailyExpense": round(self.avg_daily_expense, 2),
        }


def avg_daily_operational_expense(df: pd.DataFrame) -> float:
    total = float(operational(df)["Debit"].sum())
    if total <= 0:
        return 0.0
    return total / statement_days(df)


def low_balance_date(balance: float, avg_daily: float, reference: date) -> str:
    if avg_daily <= 0:
        return NOT_AVAILABLE
    days = max(int(balance / avg_daily), 0)
    return format_date(reference + timedelta(days=days))


def upcoming_emi(txns: Sequence[ClassifiedTransaction]) -> float:
    for t in txns:
        if t.method == Method.EMI and t.is_recurring and t.is_debit:
            return t.debit_amount
    return 0.0


def savings_recommendation(balance: float) -> str:
    if balance > 100000:
        return "Move ₹50k to FD to earn 7% interest"
    if balance > 50000:
        return "Move ₹25k to FD to earn 7% interest"
    if balance > 20000:
        return "Consider starting a recurring deposit"
    return "Build emergency fund of 3-6 months expenses"


def predictive_insights(
    df: pd.DataFrame,
    txns: Sequence[ClassifiedTransaction],
    closing_balance: float,
    reference_date: Optional[date] = None,
) -> PredictiveInsights:
    avg_daily = avg_daily_operational_expense(df)
    reference = reference_date or date.today()
    return PredictiveInsights(
        projected_30_day_spend=avg_daily * PROJECTION_DAYS,
        predicted_low_balance_date=low_balance_date(closing_balance, avg_daily, reference),
        upcoming_emi_impact=upcoming_emi(txns),
        savings_recommendation=savings_recommendation(closing_balance),
        avg_daily_expense=avg_daily,
    )
