#!/usr/bin/env python3
"""
test_analytics.py

Unit tests for the analytics roll-ups.

Tests:
- Account summary (income, expense, investments, savings rate)
- Transaction breakdown, category and merchant summaries
- Top beneficiaries / expenses ordering and limits
- Monthly summary
- Salary utilization and cash-flow score
- Anomaly profile, detectors and risk score
- Fraud alerts, whitelist and big-ticket movements
- Predictive, tax and behaviour insights
"""

import unittest
from datetime import date
from pathlib import Path
import sys

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

from statement_engine.analytics import anomaly, fraud, insights, monthly, predictive, rollups, salary, summary, tax
from statement_engine.analytics.frame import COLUMNS, statement_days, to_frame
from statement_engine.classification import classify_rows
from statement_engine.models import RawTransaction, StatementMeta
from statement_engine.recurring import detect_recurring, mark_recurring


def _row(d, narration, debit=0.0, credit=0.0, balance=0.0):
    return RawTransaction(d, narration, withdrawal_amount=debit, deposit_amount=credit, closing_balance=balance)


def _classify(rows):
    txns, _ = classify_rows(rows)
    return mark_recurring(txns, detect_recurring(txns))


def _salary_month():
    """One salary credit followed by 30 daily grocery debits of 3 000."""
    rows = [_row("01/01/2024", "SALARY CREDIT JAN 2024 ACME CORP", credit=120000, balance=130000)]
    balance = 130000.0
    for day in range(2, 32):
        balance -= 3000
        rows.append(_row(f"{day:02d}/01/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=3000, balance=balance))
    return _classify(rows)


class TestFrame(unittest.TestCase):
    """Classified rows as a DataFrame."""

    def test_empty_frame_has_columns(self):
        df = to_frame([])
        self.assertEqual(list(df.columns), COLUMNS)
        self.assertTrue(df.empty)
        self.assertEqual(statement_days(df), 30)

    def test_investment_and_transfer_not_operational(self):
        df = to_frame(_classify([
            _row("01/01/2024", "NEFT-ZERODHA BROKING LTD-HDFC0000001-REF 556677889900", debit=80000),
            _row("02/01/2024", "UPI-RAHUL SHARMA-rahul@ybl-REF 223344556677", debit=12000),
            _row("03/01/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=3000),
        ]))
        self.assertEqual(df["Is_Operational"].tolist(), [False, False, True])
        self.assertEqual(df["Is_Investment"].tolist(), [True, True, False])


class TestAccountSummary(unittest.TestCase):
    """Totals and savings rate."""

    def test_totals_partition_debits(self):
        txns = _classify([
            _row("01/01/2024", "SALARY CREDIT JAN 2024 ACME CORP", credit=100000),
            _row("02/01/2024", "NEFT-ZERODHA BROKING LTD-HDFC0000001-REF 556677889900", debit=30000),
            _row("03/01/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=20000),
            _row("04/01/2024", "CHQ PAID-GLOBEX INDUSTRIES LTD", debit=10000),
        ])
        meta = StatementMeta(account_no="50100123456789", statement_period="01/01/2024 - 31/01/2024")
        s = summary.account_summary(meta, to_frame(txns))
        self.assertEqual(s.total_income, 100000)
        self.assertEqual(s.total_investments, 30000)
        self.assertEqual(s.total_expense, 30000)
        self.assertEqual(s.net_savings, 40000)
        self.assertAlmostEqual(s.savings_rate_percent, 70.0)
        self.assertEqual(s.account_number_masked, "XXXXXX6789")
        self.assertEqual(s.year, "2024")

    def test_official_credits_override(self):
        txns = _classify([_row("01/01/2024", "SALARY CREDIT JAN 2024 ACME CORP", credit=100000)])
        meta = StatementMeta(official_total_credits=150000.0)
        self.assertEqual(summary.account_summary(meta, to_frame(txns)).total_income, 150000.0)

    def test_no_income_sentinel(self):
        txns = _classify([_row("01/01/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=500)])
        s = summary.account_summary(StatementMeta(), to_frame(txns))
        self.assertEqual(s.savings_rate_percent, summary.NO_INCOME_SAVINGS_RATE)

    def test_empty_statement(self):
        s = summary.account_summary(StatementMeta(), to_frame([]))
        self.assertEqual(s.total_income, 0)
        self.assertEqual(s.savings_rate_percent, 0.0)
        self.assertEqual(s.to_dict()["accountNumberMasked"], "XXXX")


class TestBreakdownAndRollups(unittest.TestCase):
    """Method buckets, categories, merchants, top lists."""

    def setUp(self):
        self.txns = _classify([
            _row("01/01/2024", "SALARY CREDIT JAN 2024 ACME CORP", credit=100000),
            _row("02/01/2024", "UPI-ZOMATO-ZOMATO@HDFCBANK-REF 300000000001", debit=450),
            _row("03/01/2024", "UPI-RAHUL SHARMA-rahul@ybl-REF 223344556677", debit=12000),
            _row("04/01/2024", "POS 416021XXXXXX1234 AMAZON", debit=4999),
            _row("05/01/2024", "NWD-123456-ATM MG ROAD", debit=5000),
            _row("06/01/2024", "UPI-PRIYA MEHTA-priya@okaxis-REF 223344556600", debit=2000),
            _row("07/01/2024", "NEFT-ZERODHA BROKING LTD-HDFC0000001-REF 556677889900", debit=80000),
        ])
        self.df = to_frame(self.txns)

    def test_breakdown_buckets(self):
        b = summary.transaction_breakdown(self.df)
        self.assertEqual(b["Salary"], {"amount": 100000.0, "count": 1})
        self.assertEqual(b["UPI"], {"amount": 450.0, "count": 1})
        self.assertEqual(b["DebitCard"], {"amount": 4999.0, "count": 1})
        self.assertEqual(b["ATMWithdrawal"], {"amount": 5000.0, "count": 1})
        # Investment bucket rolls in self transfers
        self.assertEqual(b["Investment"], {"amount": 94000.0, "count": 3})
        self.assertIn("Other", b)

    def test_category_summary_excludes_investments(self):
        cats = rollups.category_summary(self.df)
        self.assertEqual(cats["Food_Delivery"], 450.0)
        self.assertEqual(cats["Shopping"], 4999.0)
        self.assertEqual(cats["Other"], 5000.0)
        self.assertNotIn("Investment", cats)
        self.assertNotIn("Self_Transfer", cats)
        self.assertAlmostEqual(sum(cats.values()), 10449.0)

    def test_merchant_summary(self):
        m = rollups.merchant_summary(self.df)
        self.assertEqual(m["Amazon"], 4999.0)
        self.assertEqual(m["Zomato"], 450.0)
        self.assertEqual(m["Swiggy"], 0.0)
        self.assertEqual(m["Other"], 5000.0)

    def test_top_beneficiaries(self):
        top = rollups.top_beneficiaries(self.df, 5)
        amounts = [b["amount"] for b in top]
        self.assertEqual(amounts, sorted(amounts, reverse=True))
        self.assertEqual(top[0], {"name": "RAHUL SHARMA", "amount": 12000.0, "type": "Self_Transfer"})
        self.assertEqual(rollups.top_beneficiaries(self.df, 0), [])
        self.assertEqual(len(rollups.top_beneficiaries(self.df, 1)), 1)

    def test_top_expenses(self):
        top = rollups.top_expenses(self.df, 3)
        self.assertEqual([e["amount"] for e in top], [5000.0, 4999.0, 450.0])
        self.assertEqual(top[1]["merchant"], "Amazon")
        self.assertEqual(top[0]["merchant"], "Unknown")
        self.assertEqual(rollups.top_expenses(self.df, -1), [])

    def test_transaction_trends(self):
        months = monthly.monthly_summary(self.df)
        cats = rollups.category_summary(self.df)
        trends = rollups.transaction_trends(months, cats)
        self.assertEqual(trends, {"highestSpendMonth": "Jan 2024", "largestCategory": "Shopping"})

    def test_trends_default(self):
        self.assertEqual(
            rollups.transaction_trends([], {"Other": 100.0}),
            {"highestSpendMonth": "", "largestCategory": "Other"},
        )


class TestMonthlySummary(unittest.TestCase):
    """Per-month income / expense."""

    def test_calendar_order_and_spike(self):
        txns = _classify([
            _row("10/02/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=3000, balance=7000),
            _row("01/01/2024", "SALARY CREDIT JAN 2024 ACME CORP", credit=50000, balance=60000),
            _row("05/01/2024", "POS 416021XXXXXX1234 AMAZON", debit=1000, balance=59000),
        ])
        months = monthly.monthly_summary(to_frame(txns))
        self.assertEqual([m["month"] for m in months], ["Jan 2024", "Feb 2024"])
        jan, feb = months
        self.assertEqual(jan["income"], 50000.0)
        self.assertEqual(jan["expense"], 1000.0)
        self.assertEqual(jan["closingBalance"], 59000.0)
        self.assertEqual(jan["topCategory"], "Shopping")
        self.assertEqual(jan["expenseSpikePercent"], -66)
        self.assertEqual(feb["expenseSpikePercent"], 200)
        self.assertEqual(feb["topCategory"], "Groceries")

    def test_empty(self):
        self.assertEqual(monthly.monthly_summary(to_frame([])), [])


class TestSalaryAndCashFlow(unittest.TestCase):
    """Salary utilization windows and cash-flow score."""

    def test_salary_utilization(self):
        df = to_frame(_salary_month())
        u = salary.salary_utilization(df, 50000)
        self.assertEqual(u.average_salary, 120000)
        self.assertEqual(u.latest_salary_date, "01/01/2024")
        self.assertEqual(u.days_salary_lasts, 40)
        # Days 2-4 after the credit (3 debits)
        self.assertAlmostEqual(u.spent_first_3_days, 9000 / 120000 * 100)
        self.assertAlmostEqual(u.spent_first_7_days, 21000 / 120000 * 100)
        self.assertAlmostEqual(u.fixed_expenses + u.variable_expenses, 100.0)

    def test_no_salary(self):
        df = to_frame(_classify([_row("01/01/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=500)]))
        self.assertEqual(salary.salary_utilization(df, 50000), salary.SalaryUtilization())

    def test_cash_flow_score(self):
        cf = salary.cash_flow_score(10000, 40000, 120000, 90000)
        self.assertEqual(cf.score, 90)
        self.assertEqual(cf.status, "Excellent")
        self.assertTrue(cf.insight.endswith("Your cash flow is Excellent."))

    def test_cash_flow_without_income(self):
        cf = salary.cash_flow_score(5000, 5000, 0, 2000)
        self.assertEqual(cf.score, 15)
        self.assertEqual(cf.status, "Poor")


class TestAnomalyDetection(unittest.TestCase):
    """Profile statistics and detectors."""

    def test_category_profile(self):
        p = anomaly.category_profile([100, 200, 300, 400, 500])
        self.assertEqual(p.count, 5)
        self.assertEqual(p.mean, 300)
        self.assertEqual(p.median, 300)
        self.assertEqual(p.q1, 200)
        self.assertEqual(p.q3, 400)
        self.assertEqual(p.iqr, 200)
        self.assertEqual(p.p95, 500)
        self.assertAlmostEqual(p.std_dev, 141.4214, places=3)
        self.assertEqual(p.upper_fence, 700)
        self.assertEqual(p.to_dict()["min"], 100)

    def test_gated_by_row_count(self):
        result = anomaly.detect_anomalies(_salary_month()[:5], min_rows=10)
        self.assertEqual(result.anomaly_count, 0)
        self.assertEqual(result.total_checked, 0)
        self.assertIsNone(result.to_dict()["profile"])

    def test_unusual_amount(self):
        rows = [_row(f"{d:02d}/01/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=1000) for d in range(1, 11)]
        rows.append(_row("11/01/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=9000))
        result = anomaly.detect_anomalies(_classify(rows))
        hits = [a for a in result.anomalies if a.type == "unusual_amount"]
        self.assertEqual(len(hits), 1)
        self.assertEqual(hits[0].severity, "critical")
        self.assertEqual(hits[0].transaction_index, 10)

    def test_duplicate_within_three_days(self):
        rows = [_row(f"{d:02d}/01/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=500 + d) for d in range(1, 11)]
        rows.append(_row("04/01/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=502))
        result = anomaly.detect_anomalies(_classify(rows))
        dup = [a for a in result.anomalies if a.type == "duplicate_payment"]
        self.assertEqual(len(dup), 1)
        self.assertEqual(dup[0].severity, "medium")
        self.assertEqual(dup[0].score, 0.60)

    def test_risk_score(self):
        detail = anomaly.AnomalyDetail(0, "duplicate_payment", "high", 0.85, "", 1.0, "", "", "", "", 0.0)
        self.assertAlmostEqual(anomaly.risk_score([detail], 100), 63.75, places=2)
        self.assertAlmostEqual(anomaly.risk_score([detail], 1), 95.63, delta=0.02)
        self.assertEqual(anomaly.risk_score([], 10), 0.0)

    def test_top_anomalies_limit(self):
        rows = [_row(f"{d:02d}/01/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=1000) for d in range(1, 11)]
        rows += [_row("20/01/2024", "CHQ PAID-GLOBEX INDUSTRIES LTD", debit=50000)] * 3
        result = anomaly.detect_anomalies(_classify(rows), top_n=2)
        self.assertEqual(len(result.top_anomalies), 2)
        scores = [a.score for a in result.top_anomalies]
        self.assertEqual(scores, sorted(scores, reverse=True))


class TestFraud(unittest.TestCase):
    """Fraud alerts, whitelist and big tickets."""

    def test_whitelisted_investment_not_alerted(self):
        txns = _classify([
            _row("01/01/2024", "NEFT-ZERODHA BROKING LTD-HDFC0000001-REF 556677889900", debit=80000),
            _row("02/01/2024", "UPI-RAHUL SHARMA-rahul@ybl-REF 223344556677", debit=60000),
        ])
        self.assertTrue(all(fraud.is_whitelisted(t) for t in txns))
        risk = fraud.fraud_risk(txns)
        self.assertEqual(risk.risk_level, "Low")
        self.assertEqual(risk.recent_alerts, [])

    def test_unknown_vendor_alert(self):
        txns = _classify([_row("10/02/2024", "CHQ PAID-GLOBEX INDUSTRIES LTD", debit=50000)])
        risk = fraud.fraud_risk(txns)
        self.assertEqual(risk.recent_alerts, [{"amount": 50000.0, "merchant": "Unknown Vendor", "date": "10/02/2024"}])
        self.assertEqual(risk.risk_level, "Low")

    def test_high_risk_and_cap(self):
        txns = _classify([_row(f"{d:02d}/01/2024", "CHQ PAID-GLOBEX INDUSTRIES LTD", debit=120000) for d in range(1, 5)])
        risk = fraud.fraud_risk(txns)
        self.assertEqual(len(risk.recent_alerts), 5)
        self.assertEqual(risk.risk_level, "High")

    def test_narration_whitelist_is_word_bounded(self):
        txns = _classify([_row("01/01/2024", "CHQ PAID-PUBLIC WORKS DEPT", debit=60000)])
        self.assertFalse(fraud.is_whitelisted(txns[0]))

    def test_big_tickets(self):
        txns = _classify([
            _row("01/01/2024", "SALARY CREDIT JAN 2024 ACME CORP", credit=120000),
            _row("02/01/2024", "CHQ PAID-GLOBEX INDUSTRIES LTD", debit=50000),
            _row("03/01/2024", "POS 416021XXXXXX1234 AMAZON", debit=31000),
            _row("04/01/2024", "POS 416021XXXXXX1234 AMAZON", debit=21000),
            _row("05/01/2024", "POS 416021XXXXXX1234 AMAZON", debit=19999),
        ])
        tickets = fraud.big_ticket_movements(txns, 20000)
        self.assertEqual([t["impact"] for t in tickets], ["High Impact", "Medium Impact", "Low Impact"])
        self.assertEqual(tickets[0]["description"], "CHQ PAID-GLOBEX INDUSTRIES LTD")
        self.assertEqual(tickets[1]["description"], "Amazon")
        self.assertEqual(tickets[0]["type"], "Debit")


class TestPredictiveAndTax(unittest.TestCase):
    """Projections and deduction hints."""

    def test_low_balance_date(self):
        self.assertEqual(predictive.low_balance_date(30000, 1000, date(2024, 2, 1)), "02/03/2024")
        self.assertEqual(predictive.low_balance_date(30000, 0, date(2024, 2, 1)), "N/A")

    def test_savings_recommendation(self):
        self.assertEqual(predictive.savings_recommendation(150000), "Move ₹50k to FD to earn 7% interest")
        self.assertEqual(predictive.savings_recommendation(30000), "Consider starting a recurring deposit")
        self.assertEqual(predictive.savings_recommendation(100), "Build emergency fund of 3-6 months expenses")

    def test_predictive_insights(self):
        txns = _salary_month()
        p = predictive.predictive_insights(to_frame(txns), txns, 40000, date(2024, 2, 1))
        self.assertAlmostEqual(p.avg_daily_expense, 3000)
        self.assertAlmostEqual(p.projected_30_day_spend, 90000)
        self.assertEqual(p.predicted_low_balance_date, "14/02/2024")
        self.assertEqual(p.upcoming_emi_impact, 0.0)

    def test_tax_insights(self):
        txns = _classify([
            _row("01/01/2024", "LIC PREMIUM 123456", debit=20000),
            _row("02/01/2024", "PUBLIC PROVIDENT FUND DEPOSIT", debit=50000),
        ])
        t = tax.tax_insights(txns)
        self.assertEqual(t.section_80d_used, 20000)
        self.assertEqual(t.section_80c_used, 50000)
        self.assertAlmostEqual(t.potential_save, (100000 + 5000) * 0.3)
        self.assertIn("Invest in ELSS (Section 80C)", t.missed_deductions)
        self.assertNotIn("Consider term insurance", t.missed_deductions)
        self.assertNotIn("Start SIP in ELSS funds", t.missed_deductions)


class TestInsights(unittest.TestCase):
    """Products, behaviour and savings opportunities."""

    def test_savings_opportunities(self):
        ops = insights.savings_opportunities({"Food_Delivery": 6000.0, "Dining": 3500.0})
        self.assertEqual([o["potentialSave"] for o in ops], [1200, 3000])
        self.assertEqual(insights.savings_opportunities({}), [])

    def test_recommended_products(self):
        products = insights.recommended_products(to_frame([]), {"Travel": 15000.0}, 70)
        self.assertEqual([p["id"] for p in products], [1, 2, 3])
        self.assertEqual(products[0]["type"], "Credit Card")
        self.assertEqual(products[2]["type"], "Investment")

    def test_insured_customer_gets_no_term_plan(self):
        df = to_frame(_classify([_row("01/01/2024", "ACH D- HDFC LIFE INSURANCE-12345", debit=2500)]))
        products = insights.recommended_products(df, {}, 10)
        self.assertEqual(products, [])

    def test_cash_reliance(self):
        df = to_frame(_classify([
            _row("01/01/2024", "NWD-123456-ATM MG ROAD", debit=5000),
            _row("02/01/2024", "POS 416021XXXXXX1234 BIGBASKET", debit=1000),
        ]))
        types = [b["type"] for b in insights.behaviour_insights(df)]
        self.assertIn("Cash Reliance", types)


if __name__ == "__main__":
    unittest.main()
