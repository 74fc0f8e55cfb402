"""
frame.py

Classified rows as a pandas DataFrame, one row per transaction.

Columns are fixed (an empty statement yields an empty frame with the same
columns) so roll-ups can groupby without special-casing.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd

from ..models import INCOME_CATEGORIES, INCOME_METHODS, ClassifiedTransaction

DEFAULT_STATEMENT_DAYS = 30

COLUMNS = [
    "Index",
    "Date",
    "Date_Str",
    "Month",
    "Weekday",
    "Narration",
    "Withdrawal",
    "Deposit",
    "Debit",
    "Credit",
    "Amount",
    "Closing_Balance",
    "Method",
    "Category",
    "Merchant",
    "Beneficiary",
    "Counterparty",
    "Is_Debit",
    "Is_Credit",
    "Is_Investment",
    "Is_Income_Family",
    "Is_Operational",
    "Is_Recurring",
]

DTYPES = {
    "Index": "int64",
    "Weekday": "int64",
    "Withdrawal": "float64",
    "Deposit": "float64",
    "Debit": "float64",
    "Credit": "float64",
    "Amount": "float64",
    "Closing_Balance": "float64",
    "Is_Debit": "bool",
    "Is_Credit": "bool",
    "Is_Investment": "bool",
    "Is_Income_Family": "bool",
    "Is_Operational": "bool",
    "Is_Recurring": "bool",
}


def to_frame(txns: Sequence[ClassifiedTransaction]) -> pd.DataFrame:
    records = []
    for t in txns:
        income_family = t.category in INCOME_CATEGORIES or t.method in INCOME_METHODS
        records.append({
            "Index": t.index,
            "Date": pd.Timestamp(t.txn_date),
            "Date_Str": t.date,
            "Month": pd.Period(t.txn_date, freq="M"),
            "Weekday": t.txn_date.weekday(),
            "Narration": t.narration,
            "Withdrawal": t.withdrawal,
            "Deposit": t.deposit,
            "Debit": t.debit_amount,
            "Credit": t.credit_amount,
            "Amount": t.raw.amount,
            "Closing_Balance": t.closing_balance,
            "Method": t.method.value,
            "Category": t.category.value,
            "Merchant": t.merchant,
            "Beneficiary": t.beneficiary,
            "Counterparty": t.counterparty,
            "Is_Debit": t.is_debit,
            "Is_Credit": t.is_credit,
            "Is_Investment": t.is_investment,
            "Is_Income_Family": income_family,
            "Is_Operational": t.is_operational_expense and not income_family,
            "Is_Recurring": t.is_recurring,
        })
    df = pd.DataFrame.from_records(records, columns=COLUMNS)
    # Empty statements still need typed columns for boolean masks
    df = df.astype(DTYPES)
    df["Date"] = pd.to_datetime(df["Date"])
    return df


def operational(df: pd.DataFrame) -> pd.DataFrame:
    return df[df["Is_Operational"]]


def statement_days(df: pd.DataFrame) -> int:
    """Days between the first and last row; 30 when the dates collapse."""
    if df.empty:
        return DEFAULT_STATEMENT_DAYS
    days = (df["Date"].max() - df["Date"].min()).days
    return days if days > 0 else DEFAULT_STATEMENT_DAYS


def month_label(period: pd.Period) -> str:
    return period.strftime("%b %Y")
