from pathlib import Path
from typing import Dict

import pandas as pd

from ..response import AnalyticsResponse


def save_csv(df, path):
    df.to_csv(path, index=False)


def save_excel(tables, path):
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, df in tables.items():
            df.to_excel(writer, sheet_name=name[:31], index=False)


def save_json(response: AnalyticsResponse, path: Path):
    Path(path).write_text(response.to_json(), encoding="utf-8")


def _transactions(response: AnalyticsResponse) -> pd.DataFrame:
    rows = []
    for t in response.transactions:
        rows.append({
            "Date": t.date,
            "Narration": t.narration,
            "Withdrawal": t.withdrawal,
            "Deposit": t.deposit,
            "Closing_Balance": t.closing_balance,
            "Method": t.method.value,
            "Category": t.category.value,
            "Merchant": t.merchant,
            "Beneficiary": t.beneficiary,
            "Counterparty": t.counterparty,
            "Is_Recurring": t.is_recurring,
            "Confidence": round(t.metadata.confidence, 4),
            "Rule_Id": t.metadata.rule_id,
            "Reason": t.metadata.reason,
        })
    return pd.DataFrame(rows, columns=[
        "Date", "Narration", "Withdrawal", "Deposit", "Closing_Balance",
        "Method", "Category", "Merchant", "Beneficiary", "Counterparty",
        "Is_Recurring", "Confidence", "Rule_Id", "Reason",
    ])


def response_tables(response: AnalyticsResponse) -> Dict[str, pd.DataFrame]:
    d = response.to_dict()
    categories = pd.DataFrame(
        list(d["categorySummary"].items()), columns=["Category", "Amount"]
    )
    return {
        "Transactions": _transactions(response),
        "Monthly": pd.DataFrame(
            d["monthlySummary"],
            columns=["month", "income", "expense", "closingBalance", "topCategory", "expenseSpikePercent"],
        ),
        "Categories": categories,
        "Recurring": pd.DataFrame(
            d["recurringPayments"],
            columns=["name", "amount", "dayOfMonth", "pattern", "confidence",
                     "frequency", "firstSeen", "lastSeen", "count"],
        ),
        "Top_Expenses": pd.DataFrame(
            d["topExpenses"], columns=["merchant", "date", "amount", "category"]
        ),
        "Big_Tickets": pd.DataFrame(
            d["bigTicketMovements"],
            columns=["description", "amount", "date", "type", "category", "impact"],
        ),
        "Anomalies": pd.DataFrame(
            d["anomalyDetection"]["anomalies"],
            columns=["transactionIndex", "type", "severity", "score", "description",
                     "amount", "merchant", "category", "date", "reason", "statisticalValue"],
        ),
    }
