from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from ..models import EXPENSE_CATEGORIES, Category
from .frame import operational

BRANDED_MERCHANTS = ["Amazon", "Flipkart", "Swiggy", "Zomato", "Uber"]
OTHER_MERCHANTS = "Other"
UNKNOWN = "Unknown"


def category_summary(df: pd.DataFrame) -> Dict[str, float]:
    totals = operational(df).groupby("Category")["Debit"].sum()
    return {
        cat.value: round(float(totals.get(cat.value, 0.0)), 2)
        for cat in EXPENSE_CATEGORIES
    }


def merchant_summary(df: pd.DataFrame) -> Dict[str, float]:
    ops = operational(df)
    totals = ops.groupby("Merchant")["Debit"].sum()
    out = {m: round(float(totals.get(m, 0.0)), 2) for m in BRANDED_MERCHANTS}
    tail = ops.loc[~ops["Merchant"].isin(BRANDED_MERCHANTS), "Debit"].sum()
    out[OTHER_MERCHANTS] = round(float(tail), 2)
    return out


def top_beneficiaries(df: pd.DataFrame, limit: int) -> List[Dict[str, Any]]:
    if limit <= 0:
        return []
    d = df[df["Is_Debit"] & (df["Beneficiary"] != "")]
    if d.empty:
        return []

    per_method = (
        d.groupby(["Beneficiary", "Method"], sort=True)["Debit"]
          .sum()
          .reset_index()
    )
    # Primary method: largest amount; method name breaks ties
    per_method = per_method.sort_values(
        ["Beneficiary", "Debit", "Method"],
        ascending=[True, False, True],
        kind="mergesort",
    )
    primary = per_method.drop_duplicates("Beneficiary").set_index("Beneficiary")["Method"]
    totals = per_method.groupby("Beneficiary")["Debit"].sum().reset_index()
    totals = totals.sort_values(
        ["Debit", "Beneficiary"], ascending=[False, True], kind="mergesort"
    ).head(limit)

    return [
        {"name": name, "amount": round(float(amount), 2), "type": primary[name]}
        for name, amount in zip(totals["Beneficiary"], totals["Debit"])
    ]


def _expense_label(merchant: str, beneficiary: str) -> str:
    if merchant and merchant != UNKNOWN:
        return merchant
    return beneficiary or UNKNOWN


def top_expenses(df: pd.DataFrame, limit: int) -> List[Dict[str, Any]]:
    if limit <= 0:
        return []
    ops = operational(df).sort_values("Debit", ascending=False, kind="mergesort").head(limit)
    return [
        {
            "merchant": _expense_label(r.Merchant, r.Beneficiary),
            "date": r.Date_Str,
            "amount": round(float(r.Debit), 2),
            "category": r.Category,
        }
        for r in ops.itertuples(index=False)
    ]


def transaction_trends(
    monthly: List[Dict[str, Any]], categories: Dict[str, float]
) -> Dict[str, str]:
    highest_month = ""
    max_expense = 0.0
    for m in monthly:
        if m["expense"] > max_expense:
            max_expense = m["expense"]
            highest_month = m["month"]

    largest = Category.OTHER.value
    max_amount = 0.0
    for cat, amount in categories.items():
        if cat == Category.OTHER.value:
            continue
        if amount > max_amount:
            max_amount = amount
            largest = cat

    return {"highestSpendMonth": highest_month, "largestCategory": largest}
