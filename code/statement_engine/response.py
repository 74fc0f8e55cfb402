"""
response.py

The assembled analytics response for one statement.

Key order in to_dict() is fixed; to_json() is byte-stable for identical
input.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .analytics.anomaly import AnomalyDetection
from .analytics.fraud import FraudRisk
from .analytics.predictive import PredictiveInsights
from .analytics.salary import CashFlowScore, SalaryUtilization
from .analytics.summary import AccountSummary
from .analytics.tax import TaxInsights
from .config import RULE_VERSION
from .models import ClassifiedTransaction, RecurringPayment


@dataclass(frozen=True)
class ProcessingSummary:
    total_rows: int = 0
    classified_rows: int = 0
    skipped_rows: int = 0
    rule_version: str = RULE_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalRows": self.total_rows,
            "classifiedRows": self.classified_rows,
            "skippedRows": self.skipped_rows,
            "ruleVersion": self.rule_version,
        }


@dataclass(frozen=True)
class AnalyticsResponse:
    account_summary: AccountSummary
    transaction_breakdown: Dict[str, Dict[str, Any]]
    top_beneficiaries: List[Dict[str, Any]]
    top_expenses: List[Dict[str, Any]]
    monthly_summary: List[Dict[str, Any]]
    category_summary: Dict[str, float]
    merchant_summary: Dict[str, float]
    transaction_trends: Dict[str, str]
    recommended_products: List[Dict[str, Any]]
    predictive_insights: PredictiveInsights
    cash_flow_score: CashFlowScore
    salary_utilization: SalaryUtilization
    behaviour_insights: List[Dict[str, str]]
    recurring_payments: List[RecurringPayment]
    savings_opportunities: List[Dict[str, Any]]
    fraud_risk: FraudRisk
    big_ticket_movements: List[Dict[str, Any]]
    tax_insights: TaxInsights
    anomaly_detection: AnomalyDetection
    transactions: List[ClassifiedTransaction] = field(default_factory=list)
    processing_summary: ProcessingSummary = field(default_factory=ProcessingSummary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accountSummary": self.account_summary.to_dict(),
            "transactionBreakdown": self.transaction_breakdown,
            "topBeneficiaries": self.top_beneficiaries,
            "topExpenses": self.top_expenses,
            "monthlySummary": self.monthly_summary,
            "categorySummary": self.category_summary,
            "merchantSummary": self.merchant_summary,
            "transactionTrends": self.transaction_trends,
            "recommendedProducts": self.recommended_products,
            "predictiveInsights": self.predictive_insights.to_dict(),
            "cashFlowScore": self.cash_flow_score.to_dict(),
            "salaryUtilization": self.salary_utilization.to_dict(),
            "behaviourInsights": self.behaviour_insights,
            "recurringPayments": [rp.to_dict() for rp in self.recurring_payments],
            "savingsOpportunities": self.savings_opportunities,
            "fraudRisk": self.fraud_risk.to_dict(),
            "bigTicketMovements": self.big_ticket_movements,
            "taxInsights": self.tax_insights.to_dict(),
            "anomalyDetection": self.anomaly_detection.to_dict(),
            "transactions": [t.to_dict() for t in self.transactions],
            "processingSummary": self.processing_summary.to_dict(),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
