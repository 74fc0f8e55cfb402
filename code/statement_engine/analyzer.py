"""
analyzer.py

Single entry point: analyze(meta, rows) -> AnalyticsResponse.

Stages:
  1) classify rows (malformed rows skipped and counted)
  2) recurring inventory, then mark member rows
  3) analytics roll-ups over the classified list (read-only)
  4) assemble the response

Pure over its inputs: no I/O, no module-level state. A CancellationToken is
checked between passes; AnalysisCancelled propagates and no partial response
is returned.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Union

from .analytics import anomaly, fraud, insights, monthly, predictive, rollups, salary, summary, tax
from .analytics.frame import to_frame
from .cancellation import CancellationToken, check_cancelled
from .classification import classify_rows
from .config import DEFAULT_CONFIG, AnalyzerConfig
from .logging_setup import get_logger
from .models import RawTransaction, StatementMeta
from .recurring import detect_recurring, mark_recurring
from .response import AnalyticsResponse, ProcessingSummary

log = get_logger("statement_engine.analyzer")

RowLike = Union[RawTransaction, Mapping[str, Any]]


def _coerce_rows(rows: Sequence[RowLike]):
    return [r if isinstance(r, RawTransaction) else RawTransaction.from_dict(r) for r in rows]


def analyze(
    meta: Union[StatementMeta, Mapping[str, Any]],
    rows: Sequence[RowLike],
    config: Optional[AnalyzerConfig] = None,
    token: Optional[CancellationToken] = None,
) -> AnalyticsResponse:
    cfg = config or DEFAULT_CONFIG
    if not isinstance(meta, StatementMeta):
        meta = StatementMeta.from_dict(meta)
    raw = _coerce_rows(rows)

    # 1) classify
    classified, skipped = classify_rows(raw, meta.customer_name, cfg, token)

    # 2) recurring
    inventory = detect_recurring(classified, token)
    txns = mark_recurring(classified, inventory, token)

    # 3) analytics
    check_cancelled(token, "analytics")
    df = to_frame(txns)

    account = summary.account_summary(meta, df)
    categories = rollups.category_summary(df)
    months = monthly.monthly_summary(df)
    cash_flow = salary.cash_flow_score(
        meta.opening_balance, meta.closing_balance,
        account.total_income, account.total_expense,
    )

    if cfg.enable_anomaly:
        anomalies = anomaly.detect_anomalies(
            txns, cfg.min_rows_for_anomalies, cfg.top_anomalies_limit, token
        )
    else:
        anomalies = anomaly.AnomalyDetection()

    check_cancelled(token, "analytics")
    fraud_risk = (
        fraud.fraud_risk(
            txns,
            cfg.fraud_alert_threshold,
            cfg.fraud_high_value_threshold,
            cfg.unknown_vendor_threshold,
        )
        if cfg.enable_fraud else fraud.FraudRisk()
    )
    predictions = (
        predictive.predictive_insights(df, txns, meta.closing_balance, cfg.reference_date)
        if cfg.enable_predictive else predictive.PredictiveInsights()
    )
    taxes = tax.tax_insights(txns) if cfg.enable_tax else tax.TaxInsights()

    # 4) assemble
    response = AnalyticsResponse(
        account_summary=account,
        transaction_breakdown=summary.transaction_breakdown(df),
        top_beneficiaries=rollups.top_beneficiaries(df, cfg.top_beneficiaries_limit),
        top_expenses=rollups.top_expenses(df, cfg.top_expenses_limit),
        monthly_summary=months,
        category_summary=categories,
        merchant_summary=rollups.merchant_summary(df),
        transaction_trends=rollups.transaction_trends(months, categories),
        recommended_products=insights.recommended_products(df, categories, cash_flow.score),
        predictive_insights=predictions,
        cash_flow_score=cash_flow,
        salary_utilization=salary.salary_utilization(df, cfg.salary_auto_detect_threshold),
        behaviour_insights=insights.behaviour_insights(df),
        recurring_payments=inventory,
        savings_opportunities=insights.savings_opportunities(categories),
        fraud_risk=fraud_risk,
        big_ticket_movements=fraud.big_ticket_movements(txns, cfg.big_ticket_threshold),
        tax_insights=taxes,
        anomaly_detection=anomalies,
        transactions=txns,
        processing_summary=ProcessingSummary(
            total_rows=len(raw),
            classified_rows=len(txns),
            skipped_rows=skipped,
        ),
    )
    log.info(
        "analyzed %d rows (%d skipped): %d recurring, %d anomalies",
        len(raw), skipped, len(inventory), anomalies.anomaly_count,
    )
    return response
