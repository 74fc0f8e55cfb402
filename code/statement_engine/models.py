"""
models.py

Typed records passed between pipeline stages.

- Method / Category / Rail are closed enums; every classified row carries
  exactly one Method and one Category (Other is the fallback).
- RawTransaction is the input row, ClassifiedTransaction the output row.
- Records are frozen: a later stage derives a new record with
  dataclasses.replace instead of mutating an earlier one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


# ======================================================
# ENUMS
# ======================================================

class Method(str, Enum):
    UPI = "UPI"
    IMPS = "IMPS"
    NEFT = "NEFT"
    RTGS = "RTGS"
    DEBIT_CARD = "DebitCard"
    NET_BANKING = "NetBanking"
    EMI = "EMI"
    ACH = "ACH"
    NACH = "NACH"
    ECS = "ECS"
    ATM_WITHDRAWAL = "ATMWithdrawal"
    CHEQUE = "Cheque"
    SALARY = "Salary"
    INTEREST = "Interest"
    DIVIDEND = "Dividend"
    RD = "RD"
    FD = "FD"
    SIP = "SIP"
    INVESTMENT = "Investment"
    SELF_TRANSFER = "Self_Transfer"
    INSURANCE = "Insurance"
    TAX_PAYMENT = "TaxPayment"
    ONLINE_SHOPPING = "OnlineShopping"
    OTHER = "Other"


class Category(str, Enum):
    FOOD_DELIVERY = "Food_Delivery"
    DINING = "Dining"
    GROCERIES = "Groceries"
    SHOPPING = "Shopping"
    TRAVEL = "Travel"
    FUEL = "Fuel"
    BILLS_UTILITIES = "Bills_Utilities"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    ENTERTAINMENT = "Entertainment"
    LOAN = "Loan"
    INVESTMENT = "Investment"
    SELF_TRANSFER = "Self_Transfer"
    INCOME = "Income"
    REFUND = "Refund"
    REIMBURSEMENT = "Reimbursement"
    SALARY = "Salary"
    OTHER = "Other"


class Rail(str, Enum):
    UPI = "UPI"
    IMPS = "IMPS"
    NEFT = "NEFT"
    RTGS = "RTGS"
    ACH = "ACH"
    NACH = "NACH"
    ECS = "ECS"
    POS = "POS"
    NET_BANKING = "NetBanking"
    CHEQUE = "Cheque"
    UNKNOWN = "Unknown"


INVESTMENT_CATEGORIES = frozenset({Category.INVESTMENT, Category.SELF_TRANSFER})
INVESTMENT_METHODS = frozenset({Method.RD, Method.FD, Method.SIP, Method.INVESTMENT})
INCOME_CATEGORIES = frozenset({
    Category.SALARY, Category.INCOME, Category.REFUND, Category.REIMBURSEMENT,
})
INCOME_METHODS = frozenset({Method.SALARY, Method.INTEREST, Method.DIVIDEND})

# Categories a debit may be rolled into as operational spend
EXPENSE_CATEGORIES = (
    Category.SHOPPING,
    Category.BILLS_UTILITIES,
    Category.TRAVEL,
    Category.DINING,
    Category.GROCERIES,
    Category.FOOD_DELIVERY,
    Category.FUEL,
    Category.LOAN,
    Category.HEALTHCARE,
    Category.EDUCATION,
    Category.ENTERTAINMENT,
    Category.OTHER,
)


# ======================================================
# INPUT
# ======================================================

def _to_amount(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if value != value else float(value)
    s = str(value).replace(",", "").strip()
    if s == "" or s.lower() in {"nan", "none", "-"}:
        return 0.0
    try:
        return float(s)
    except ValueError:
        return 0.0


def _first(d: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in d and d[k] is not None:
            return d[k]
    return default


@dataclass(frozen=True)
class RawTransaction:
    date: str
    narration: str
    withdrawal_amount: float = 0.0
    deposit_amount: float = 0.0
    closing_balance: float = 0.0
    cheque_ref_no: str = ""
    value_date: str = ""

    def __post_init__(self) -> None:
        if self.withdrawal_amount < 0 or self.deposit_amount < 0:
            raise ValueError(
                "RawTransaction amounts must be non-negative "
                f"(withdrawal={self.withdrawal_amount}, deposit={self.deposit_amount}, "
                f"date={self.date!r})"
            )

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "RawTransaction":
        """Build from the camelCase row shape (withdrawalAmt/depositAmt also accepted)."""
        return cls(
            date=str(_first(d, "date", "txnDate", default="")).strip(),
            narration=str(_first(d, "narration", default="")),
            withdrawal_amount=_to_amount(_first(d, "withdrawalAmount", "withdrawalAmt")),
            deposit_amount=_to_amount(_first(d, "depositAmount", "depositAmt")),
            closing_balance=_to_amount(_first(d, "closingBalance")),
            cheque_ref_no=str(_first(d, "chequeRefNo", default="")),
            value_date=str(_first(d, "valueDate", default="")),
        )

    @property
    def debit_amount(self) -> float:
        """Net outflow; both-sided rows resolve to the larger side."""
        return max(self.withdrawal_amount - self.deposit_amount, 0.0)

    @property
    def credit_amount(self) -> float:
        return max(self.deposit_amount - self.withdrawal_amount, 0.0)

    @property
    def is_credit(self) -> bool:
        return self.deposit_amount > self.withdrawal_amount

    @property
    def is_debit(self) -> bool:
        return self.withdrawal_amount > self.deposit_amount

    @property
    def amount(self) -> float:
        return abs(self.deposit_amount - self.withdrawal_amount)


@dataclass(frozen=True)
class StatementMeta:
    account_no: str = ""
    customer_name: str = ""
    statement_period: str = ""
    opening_balance: float = 0.0
    closing_balance: float = 0.0
    official_total_credits: Optional[float] = None
    official_total_debits: Optional[float] = None

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "StatementMeta":
        credits = _first(d, "officialTotalCredits")
        debits = _first(d, "officialTotalDebits")
        return cls(
            account_no=str(_first(d, "accountNo", default="")),
            customer_name=str(_first(d, "customerName", default="")),
            statement_period=str(_first(d, "statementPeriod", default="")),
            opening_balance=_to_amount(_first(d, "openingBalance")),
            closing_balance=_to_amount(_first(d, "closingBalance")),
            official_total_credits=None if credits is None else _to_amount(credits),
            official_total_debits=None if debits is None else _to_amount(debits),
        )


# ======================================================
# CLASSIFICATION OUTPUT
# ======================================================

@dataclass(frozen=True)
class ClassificationMetadata:
    confidence: float
    matched_keywords: Tuple[str, ...]
    gateway: str
    wallet: str
    channel: str
    rule_version: str
    rule_id: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "confidence": round(self.confidence, 4),
            "matchedKeywords": list(self.matched_keywords),
            "gateway": self.gateway,
            "wallet": self.wallet,
            "channel": self.channel,
            "ruleVersion": self.rule_version,
            "ruleId": self.rule_id,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class RecurringMetadata:
    confidence: int
    frequency: str
    first_seen: str
    last_seen: str
    count: int
    pattern: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "confidence": self.confidence,
            "frequency": self.frequency,
            "firstSeen": self.first_seen,
            "lastSeen": self.last_seen,
            "count": self.count,
            "pattern": self.pattern,
        }


@dataclass(frozen=True)
class ClassifiedTransaction:
    index: int
    raw: RawTransaction
    txn_date: date
    method: Method
    category: Category
    merchant: str
    beneficiary: str
    counterparty: str
    metadata: ClassificationMetadata
    signature: str = ""
    is_recurring: bool = False
    recurring: Optional[RecurringMetadata] = None

    # Raw passthroughs keep analytics code close to the statement columns
    @property
    def date(self) -> str:
        return self.raw.date

    @property
    def narration(self) -> str:
        return self.raw.narration

    @property
    def withdrawal(self) -> float:
        return self.raw.withdrawal_amount

    @property
    def deposit(self) -> float:
        return self.raw.deposit_amount

    @property
    def closing_balance(self) -> float:
        return self.raw.closing_balance

    @property
    def debit_amount(self) -> float:
        return self.raw.debit_amount

    @property
    def credit_amount(self) -> float:
        return self.raw.credit_amount

    @property
    def is_debit(self) -> bool:
        return self.raw.is_debit

    @property
    def is_credit(self) -> bool:
        return self.raw.is_credit

    @property
    def is_income(self) -> bool:
        return self.raw.deposit_amount > 0 and self.raw.withdrawal_amount == 0

    @property
    def is_investment(self) -> bool:
        return self.category in INVESTMENT_CATEGORIES or self.method in INVESTMENT_METHODS

    @property
    def is_operational_expense(self) -> bool:
        return self.is_debit and not self.is_investment

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.raw.date,
            "narration": self.raw.narration,
            "chequeRefNo": self.raw.cheque_ref_no,
            "valueDate": self.raw.value_date,
            "withdrawalAmount": round(self.raw.withdrawal_amount, 2),
            "depositAmount": round(self.raw.deposit_amount, 2),
            "closingBalance": round(self.raw.closing_balance, 2),
            "method": self.method.value,
            "category": self.category.value,
            "merchant": self.merchant,
            "beneficiary": self.beneficiary,
            "counterparty": self.counterparty,
            "isIncome": self.is_income,
            "isRecurring": self.is_recurring,
            "recurringMetadata": self.recurring.to_dict() if self.recurring else None,
            "classificationMetadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True)
class RecurringPayment:
    name: str
    amount: float
    day_of_month: int
    pattern: str
    confidence: int
    frequency: str
    first_seen: str
    last_seen: str
    count: int
    signature: str
    member_indices: Tuple[int, ...] = field(default_factory=tuple)

    def metadata(self) -> RecurringMetadata:
        return RecurringMetadata(
            confidence=self.confidence,
            frequency=self.frequency,
            first_seen=self.first_seen,
            last_seen=self.last_seen,
            count=self.count,
            pattern=self.pattern,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "amount": round(self.amount, 2),
            "dayOfMonth": self.day_of_month,
            "pattern": self.pattern,
            "confidence": self.confidence,
            "frequency": self.frequency,
            "firstSeen": self.first_seen,
            "lastSeen": self.last_seen,
            "count": self.count,
        }
