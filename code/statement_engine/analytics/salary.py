"""
salary.py

Salary utilization and cash-flow health.

Salary rows are credits with method or category Salary, or large credits
(>= the auto-detect threshold) whose narration names SALARY/SAL/PAYROLL/WAGES.
Spend windows count operational expense (no investments, no self transfers)
in the 3/7/15 days after the latest salary credit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List

import pandas as pd

from ..models import Category, Method
from .frame import operational, statement_days

P_SALARY_WORDS = re.compile(r"\b(?:SALARY|SAL|PAYROLL|WAGES)\b")
P_FIXED_WORDS = re.compile(r"\b(?:RENT|SUBSCRIPTION)\b")

SPEND_WINDOWS = (3, 7, 15)


@dataclass(frozen=True)
class SalaryUtilization:
    spent_first_3_days: float = 0.0
    spent_first_7_days: float = 0.0
    spent_first_15_days: float = 0.0
    days_salary_lasts: int = 0
    fixed_expenses: float = 0.0
    variable_expenses: float = 0.0
    average_salary: float = 0.0
    latest_salary_date: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spentFirst3Days": round(self.spent_first_3_days, 2),
            "spentFirst7Days": round(self.spent_first_7_days, 2),
            "spentFirst15Days": round(self.spent_first_15_days, 2),
            "daysSalaryLasts": self.days_salary_lasts,
            "fixedExpenses": round(self.fixed_expenses, 2),
            "variableExpenses": round(self.variable_expenses, 2),
            "averageSalary": round(self.average_salary, 2),
            "latestSalaryDate": self.latest_salary_date,
        }


@dataclass(frozen=True)
class CashFlowScore:
    score: int
    status: str
    insight: str

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "status": self.status, "insight": self.insight}


def salary_rows(df: pd.DataFrame, threshold: float) -> pd.DataFrame:
    credits = df[(df["Deposit"] > 0) & (df["Withdrawal"] == 0)]
    tagged = (credits["Method"] == Method.SALARY.value) | (credits["Category"] == Category.SALARY.value)
    large = (credits["Deposit"] >= threshold) & credits["Narration"].str.upper().str.contains(P_SALARY_WORDS)
    return credits[tagged | large]


def _fixed_mask(ops: pd.DataFrame) -> pd.Series:
    loan = (ops["Method"] == Method.EMI.value) | (ops["Category"] == Category.LOAN.value)
    words = ops["Narration"].str.upper().str.contains(P_FIXED_WORDS)
    return ops["Is_Recurring"] | loan | words


def salary_utilization(df: pd.DataFrame, threshold: float) -> SalaryUtilization:
    salaries = salary_rows(df, threshold)
    if salaries.empty:
        return SalaryUtilization()

    latest = salaries.sort_values("Date", kind="mergesort").iloc[-1]
    avg_salary = float(salaries["Deposit"].mean())

    ops = operational(df)
    ops = ops[ops["Debit"] > 0]
    after = (ops["Date"] - latest["Date"]).dt.days
    spent: List[float] = []
    for window in SPEND_WINDOWS:
        total = float(ops.loc[(after >= 0) & (after <= window), "Debit"].sum())
        spent.append(total / avg_salary * 100 if avg_salary > 0 else 0.0)

    total_expense = float(ops["Debit"].sum())
    avg_daily = total_expense / statement_days(df)
    days_lasts = int(avg_salary / avg_daily) if avg_daily > 0 else 0

    fixed = float(ops.loc[_fixed_mask(ops), "Debit"].sum())
    if total_expense > 0:
        fixed_pct = fixed / total_expense * 100
        variable_pct = (total_expense - fixed) / total_expense * 100
    else:
        fixed_pct = variable_pct = 0.0

    return SalaryUtilization(
        spent_first_3_days=spent[0],
        spent_first_7_days=spent[1],
        spent_first_15_days=spent[2],
        days_salary_lasts=days_lasts,
        fixed_expenses=fixed_pct,
        variable_expenses=variable_pct,
        average_salary=avg_salary,
        latest_salary_date=str(latest["Date_Str"]),
    )


def cash_flow_score(
    opening_balance: float,
    closing_balance: float,
    total_income: float,
    total_expense: float,
) -> CashFlowScore:
    score = 0
    notes: List[str] = []

    savings_rate = (total_income - total_expense) / total_income * 100 if total_income > 0 else 0.0
    if savings_rate > 20:
        score += 30
        notes.append("Excellent savings rate.")
    elif savings_rate > 10:
        score += 20
        notes.append("Good savings rate.")
    elif savings_rate > 0:
        score += 10
        notes.append("Positive savings.")

    if closing_balance > opening_balance:
        score += 25
        notes.append("Balance increased.")
    elif closing_balance == opening_balance:
        score += 15
        notes.append("Balance maintained.")
    else:
        score += 5
        notes.append("Balance decreased.")

    if total_income > 0:
        score += 25
        notes.append("Regular income detected.")

    expense_ratio = total_expense / total_income * 100 if total_income > 0 else 0.0
    if total_income > 0 and expense_ratio < 70:
        score += 20
        notes.append("Expenses under control.")
    elif total_income > 0 and expense_ratio < 90:
        score += 10
        notes.append("Expenses manageable.")

    if score >= 80:
        status = "Excellent"
    elif score >= 60:
        status = "Healthy"
    elif score >= 40:
        status = "Moderate"
    else:
        status = "Poor"

    insight = " ".join(notes + [f"Your cash flow is {status}."])
    return CashFlowScore(score=score, status=status, insight=insight)
