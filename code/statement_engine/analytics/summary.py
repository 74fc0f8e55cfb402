from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import pandas as pd

from ..dates import mask_account_number, statement_year
from ..models import StatementMeta

NO_INCOME_SAVINGS_RATE = -999.0

# (bucket, methods rolled into it)
BREAKDOWN_BUCKETS: List[Tuple[str, Tuple[str, ...]]] = [
    ("UPI", ("UPI",)),
    ("IMPS", ("IMPS",)),
    ("NEFT", ("NEFT",)),
    ("RTGS", ("RTGS",)),
    ("EMI", ("EMI",)),
    ("BillPaid", ("ACH", "NACH", "ECS", "Insurance", "TaxPayment")),
    ("DebitCard", ("DebitCard", "OnlineShopping")),
    ("ATMWithdrawal", ("ATMWithdrawal",)),
    ("NetBanking", ("NetBanking",)),
    ("Salary", ("Salary",)),
    ("RD", ("RD",)),
    ("FD", ("FD",)),
    ("SIP", ("SIP",)),
    ("Interest", ("Interest",)),
    ("Cheque", ("Cheque",)),
    ("Dividend", ("Dividend",)),
    ("Investment", ("Investment", "RD", "FD", "SIP", "Self_Transfer")),
]
OTHER_BUCKET = "Other"


@dataclass(frozen=True)
class AccountSummary:
    account_number_masked: str
    customer_name: str
    statement_period: str
    year: str
    opening_balance: float
    closing_balance: float
    total_income: float
    total_expense: float
    total_investments: float
    net_savings: float
    savings_rate_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accountNumberMasked": self.account_number_masked,
            "customerName": self.customer_name,
            "statementPeriod": self.statement_period,
            "year": self.year,
            "openingBalance": round(self.opening_balance, 2),
            "closingBalance": round(self.closing_balance, 2),
            "totalIncome": round(self.total_income, 2),
            "totalExpense": round(self.total_expense, 2),
            "totalInvestments": round(self.total_investments, 2),
            "netSavings": round(self.net_savings, 2),
            "savingsRatePercent": round(self.savings_rate_percent, 2),
        }


def account_summary(meta: StatementMeta, df: pd.DataFrame) -> AccountSummary:
    debits = df[df["Is_Debit"]]
    total_investments = float(debits.loc[debits["Is_Investment"], "Debit"].sum())
    total_expense = float(debits.loc[~debits["Is_Investment"], "Debit"].sum())

    official = meta.official_total_credits
    if official is not None and official > 0:
        total_income = float(official)
    else:
        total_income = float(df["Credit"].sum())

    if total_income > 0:
        savings_rate = (total_income - total_expense) / total_income * 100
    elif total_expense > 0 or total_investments > 0:
        savings_rate = NO_INCOME_SAVINGS_RATE
    else:
        savings_rate = 0.0

    return AccountSummary(
        account_number_masked=mask_account_number(meta.account_no),
        customer_name=meta.customer_name,
        statement_period=meta.statement_period,
        year=statement_year(meta.statement_period),
        opening_balance=meta.opening_balance,
        closing_balance=meta.closing_balance,
        total_income=total_income,
        total_expense=total_expense,
        total_investments=total_investments,
        net_savings=total_income - total_expense - total_investments,
        savings_rate_percent=savings_rate,
    )


def transaction_breakdown(df: pd.DataFrame) -> Dict[str, Dict[str, Any]]:
    by_method = df.groupby("Method")["Amount"].agg(["sum", "count"])
    known = set()
    out: Dict[str, Dict[str, Any]] = {}
    for bucket, methods in BREAKDOWN_BUCKETS:
        known.update(methods)
        rows = by_method[by_method.index.isin(methods)]
        out[bucket] = {
            "amount": round(float(rows["sum"].sum()), 2),
            "count": int(rows["count"].sum()),
        }
    rest = by_method[~by_method.index.isin(known)]
    out[OTHER_BUCKET] = {
        "amount": round(float(rest["sum"].sum()), 2),
        "count": int(rest["count"].sum()),
    }
    return out
