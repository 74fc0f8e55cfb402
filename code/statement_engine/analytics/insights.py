from __future__ import annotations

import re
from typing import Any, Dict, List

import pandas as pd

from ..models import Category, Method
from .frame import operational

TRAVEL_CARD_THRESHOLD = 10000
DEMAT_SCORE_THRESHOLD = 60
WEEKEND_RATIO = 1.2
FOOD_DELIVERY_ORDERS = 8
CASH_SHARE = 0.30

P_INSURANCE = re.compile(r"\b(?:LIC|INSURANCE|PREMIUM|HDFC\s+LIFE|MAXLIFE|SBI\s+LIFE)\b")


def _product(pid: int, name: str, kind: str, reason: str, icon: str) -> Dict[str, Any]:
    return {
        "id": pid,
        "productName": name,
        "type": kind,
        "reason": reason,
        "icon": icon,
        "actionLink": "#",
    }


def recommended_products(
    df: pd.DataFrame, categories: Dict[str, float], cash_flow_score: int
) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []

    if categories.get(Category.TRAVEL.value, 0.0) > TRAVEL_CARD_THRESHOLD:
        out.append(_product(
            len(out) + 1, "IndianOil HDFC Bank Credit Card", "Credit Card",
            "You spent significant amount on Travel/Fuel. Save 5% on fuel spends.", "Fuel",
        ))

    bills = df[df["Is_Debit"] & (df["Category"] == Category.BILLS_UTILITIES.value)]
    if not bills["Narration"].str.upper().str.contains(P_INSURANCE).any():
        out.append(_product(
            len(out) + 1, "HDFC Life Click 2 Protect", "Insurance",
            "No active term insurance detected. Secure your family's future.", "Shield",
        ))

    if cash_flow_score > DEMAT_SCORE_THRESHOLD:
        out.append(_product(
            len(out) + 1, "HDFC Sky Demat Account", "Investment",
            "You have a healthy savings balance. Start investing in stocks & MFs.", "TrendingUp",
        ))
    return out


def behaviour_insights(df: pd.DataFrame) -> List[Dict[str, str]]:
    ops = operational(df)
    out: List[Dict[str, str]] = []
    if ops.empty:
        return out

    weekend = ops["Weekday"] >= 5
    if weekend.any() and (~weekend).any():
        weekend_avg = float(ops.loc[weekend, "Debit"].mean())
        weekday_avg = float(ops.loc[~weekend, "Debit"].mean())
        if weekday_avg > 0 and weekend_avg > weekday_avg * WEEKEND_RATIO:
            pct = int((weekend_avg / weekday_avg - 1) * 100)
            out.append({
                "type": "Weekend Spender",
                "insight": f"You spend {pct}% more per transaction on weekends than on weekdays.",
            })

    orders = int((ops["Category"] == Category.FOOD_DELIVERY.value).sum())
    if orders >= FOOD_DELIVERY_ORDERS:
        out.append({
            "type": "Frequent Food Delivery",
            "insight": f"You placed {orders} food delivery orders this period.",
        })

    total = float(ops["Debit"].sum())
    cash = float(ops.loc[ops["Method"] == Method.ATM_WITHDRAWAL.value, "Debit"].sum())
    if total > 0 and cash / total > CASH_SHARE:
        out.append({
            "type": "Cash Reliance",
            "insight": f"{int(cash / total * 100)}% of your spending is ATM cash withdrawals.",
        })
    return out


def savings_opportunities(categories: Dict[str, float]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    if categories.get(Category.FOOD_DELIVERY.value, 0.0) > 5000:
        out.append({
            "category": "Switch to Annual Plan",
            "potentialSave": 1200,
            "action": "Switch",
            "difficulty": "Easy",
            "impact": "High",
        })
    if categories.get(Category.DINING.value, 0.0) > 3000:
        out.append({
            "category": "Reduce Dining Out",
            "potentialSave": 3000,
            "action": "Limit",
            "difficulty": "Medium",
            "impact": "Medium",
        })
    return out
