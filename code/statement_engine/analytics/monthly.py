from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from ..models import Category
from .frame import month_label, operational


def _top_category(ops_month: pd.DataFrame) -> str:
    if ops_month.empty:
        return Category.OTHER.value
    totals = ops_month.groupby("Category", sort=False)["Debit"].sum()
    # First category to reach the maximum wins
    return str(totals.idxmax()) if totals.max() > 0 else Category.OTHER.value


def _spike_percent(expenses: pd.Series, month: pd.Period) -> int:
    others = expenses.drop(month)
    if others.empty:
        return 0
    avg = float(others.mean())
    if avg == 0:
        return 0
    return int((float(expenses[month]) - avg) / avg * 100)


def monthly_summary(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Calendar-ordered month rows: income, operational expense, closing balance."""
    if df.empty:
        return []

    months = sorted(df["Month"].unique())
    ops = operational(df)
    income = df.groupby("Month")["Credit"].sum()
    expense = ops.groupby("Month")["Debit"].sum().reindex(months, fill_value=0.0)
    # Closing balance is the last statement row of the month
    closing = df.groupby("Month", sort=False)["Closing_Balance"].last()

    out = []
    for m in months:
        out.append({
            "month": month_label(m),
            "income": round(float(income.get(m, 0.0)), 2),
            "expense": round(float(expense[m]), 2),
            "closingBalance": round(float(closing[m]), 2),
            "topCategory": _top_category(ops[ops["Month"] == m]),
            "expenseSpikePercent": _spike_percent(expense, m),
        })
    return out
