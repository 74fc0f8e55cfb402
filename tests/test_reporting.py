#!/usr/bin/env python3
"""
test_reporting.py

Tests for the file-based reporting layer around analyze().

Tests:
- Statement CSV loading (amount cleaning, optional columns, missing columns)
- Settings from arguments and environment
- JSON / Excel / CSV table output
- Monthly chart output
- run_analysis end to end in a temp directory
"""

import json
import os
import shutil
import sys
import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest import mock

os.environ.setdefault("MPLBACKEND", "Agg")

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

import pandas as pd

from statement_engine import AnalyzerConfig, StatementMeta, analyze
from statement_engine.reporting.charts import plot_monthly
from statement_engine.reporting.config import build_settings
from statement_engine.reporting.io import ensure_dirs, load_settings, load_statement
from statement_engine.reporting.report import response_tables, save_csv, save_excel, save_json

STATEMENT_CSV = """Date,Narration,Chq_Ref_No,Value_Date,Withdrawal_Amount,Deposit_Amount,Closing_Balance
01/01/2024,SALARY CREDIT JAN 2024 ACME CORP,,01/01/24,,"1,20,000.00","1,30,000.00"
02/01/2024,POS 416021XXXXXX1234 BIGBASKET,,02/01/24,"2,500.00",,"1,27,500.00"
05/01/2024,ACH D STAFF LOAN EMI REC 05-JAN-2024 REF 1234567890,,05/01/24,15000,,112500
05/02/2024,ACH D STAFF LOAN EMI REC 05-FEB-2024 REF 1234567891,,05/02/24,15000,,97500
"""


def _clean_env():
    return {
        k: v for k, v in os.environ.items()
        if not k.startswith(("ANALYSIS_", "STATEMENT_"))
    }


class ReportingTestCase(unittest.TestCase):
    """Temp directory holding one statement CSV."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.csv_path = self.temp_dir / "statement.csv"
        self.csv_path.write_text(STATEMENT_CSV, encoding="utf-8")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)


class TestLoadStatement(ReportingTestCase):
    """CSV to RawTransaction rows."""

    def test_amounts_cleaned(self):
        rows = load_statement(self.csv_path)
        self.assertEqual(len(rows), 4)
        self.assertEqual(rows[0].date, "01/01/2024")
        self.assertEqual(rows[0].deposit_amount, 120000.0)
        self.assertEqual(rows[0].withdrawal_amount, 0.0)
        self.assertEqual(rows[1].withdrawal_amount, 2500.0)
        self.assertEqual(rows[1].closing_balance, 127500.0)
        self.assertEqual(rows[1].value_date, "02/01/24")

    def test_optional_columns_default_to_blank(self):
        path = self.temp_dir / "minimal.csv"
        path.write_text(
            "Date,Narration,Withdrawal_Amount,Deposit_Amount,Closing_Balance\n"
            "02/01/2024,NWD-123456-ATM MG ROAD,5000,,5000\n",
            encoding="utf-8",
        )
        rows = load_statement(path)
        self.assertEqual(rows[0].cheque_ref_no, "")
        self.assertEqual(rows[0].value_date, "")
        self.assertEqual(rows[0].withdrawal_amount, 5000.0)

    def test_missing_columns(self):
        path = self.temp_dir / "broken.csv"
        path.write_text("Date,Narration\n01/01/2024,SALARY\n", encoding="utf-8")
        with self.assertRaises(ValueError) as ctx:
            load_statement(path)
        self.assertIn("Withdrawal_Amount", str(ctx.exception))


class TestSettings(ReportingTestCase):
    """Settings from arguments and environment."""

    def test_build_settings(self):
        s = build_settings(str(self.csv_path), str(self.temp_dir / "out"))
        self.assertEqual(s.input_csv, self.csv_path)
        self.assertEqual(s.charts_dir, self.temp_dir / "out" / "charts")
        self.assertEqual(s.tables_dir, self.temp_dir / "out" / "tables")
        self.assertEqual(s.meta, StatementMeta())

        ensure_dirs(s)
        self.assertTrue(s.charts_dir.is_dir())
        self.assertTrue(s.tables_dir.is_dir())

    def test_missing_paths(self):
        with mock.patch.dict(os.environ, _clean_env(), clear=True):
            with self.assertRaises(ValueError):
                load_settings()

    def test_environment(self):
        env = _clean_env()
        env.update({
            "ANALYSIS_INPUT_CSV": str(self.csv_path),
            "ANALYSIS_OUTPUT_DIR": str(self.temp_dir / "out"),
            "STATEMENT_ACCOUNT_NO": "50100123456789",
            "STATEMENT_CUSTOMER_NAME": "ANITA DESAI",
            "STATEMENT_OPENING_BALANCE": "10,000.00",
            "STATEMENT_CLOSING_BALANCE": "97500",
        })
        with mock.patch.dict(os.environ, env, clear=True):
            s = load_settings()
        self.assertEqual(s.input_csv, self.csv_path)
        self.assertEqual(s.meta.customer_name, "ANITA DESAI")
        self.assertEqual(s.meta.opening_balance, 10000.0)
        self.assertEqual(s.meta.closing_balance, 97500.0)

    def test_non_numeric_balance(self):
        env = _clean_env()
        env["STATEMENT_OPENING_BALANCE"] = "ten thousand"
        with mock.patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ValueError):
                load_settings(str(self.csv_path), str(self.temp_dir / "out"))


class TestReportOutputs(ReportingTestCase):
    """JSON, tables, workbook and chart."""

    def setUp(self):
        super().setUp()
        meta = StatementMeta(account_no="50100123456789", opening_balance=10000.0, closing_balance=97500.0)
        self.response = analyze(
            meta, load_statement(self.csv_path), AnalyzerConfig(reference_date=date(2024, 3, 1))
        )

    def test_save_json(self):
        path = self.temp_dir / "analysis.json"
        save_json(self.response, path)
        d = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(d["accountSummary"]["accountNumberMasked"], "XXXXXX6789")
        self.assertEqual(len(d["transactions"]), 4)

    def test_response_tables(self):
        tables = response_tables(self.response)
        self.assertEqual(
            list(tables),
            ["Transactions", "Monthly", "Categories", "Recurring", "Top_Expenses", "Big_Tickets", "Anomalies"],
        )
        self.assertEqual(len(tables["Transactions"]), 4)
        self.assertEqual(list(tables["Monthly"]["month"]), ["Jan 2024", "Feb 2024"])
        self.assertEqual(len(tables["Recurring"]), 1)
        # Four rows: too few for anomaly detection
        self.assertTrue(tables["Anomalies"].empty)
        self.assertIn("Rule_Id", tables["Transactions"].columns)

    def test_save_csv_and_excel(self):
        tables = response_tables(self.response)
        save_csv(tables["Transactions"], self.temp_dir / "Transactions.csv")
        back = pd.read_csv(self.temp_dir / "Transactions.csv")
        self.assertEqual(list(back["Category"]), ["Salary", "Groceries", "Loan", "Loan"])

        workbook = self.temp_dir / "analysis.xlsx"
        save_excel(tables, workbook)
        sheets = pd.read_excel(workbook, sheet_name=None, engine="openpyxl")
        self.assertEqual(set(sheets), set(tables))
        self.assertEqual(len(sheets["Transactions"]), 4)

    def test_plot_monthly(self):
        tables = response_tables(self.response)
        chart = self.temp_dir / "monthly.png"
        self.assertTrue(plot_monthly(tables["Monthly"], chart, "Monthly Income vs Expense"))
        self.assertTrue(chart.exists())

        empty = tables["Monthly"].iloc[0:0]
        self.assertFalse(plot_monthly(empty, self.temp_dir / "empty.png", "Empty"))
        self.assertFalse((self.temp_dir / "empty.png").exists())


class TestRunAnalysis(ReportingTestCase):
    """run_analysis.main writes every output."""

    def test_main(self):
        import run_analysis

        out = self.temp_dir / "out"
        env = _clean_env()
        env.update({"ANALYSIS_INPUT_CSV": str(self.csv_path), "ANALYSIS_OUTPUT_DIR": str(out)})
        with mock.patch.dict(os.environ, env, clear=True):
            run_analysis.main()

        self.assertTrue((out / "statement_analysis.json").exists())
        self.assertTrue((out / "statement_analysis.xlsx").exists())
        self.assertTrue((out / "tables" / "Monthly.csv").exists())
        self.assertTrue((out / "charts" / "monthly_income_expense.png").exists())


if __name__ == "__main__":
    unittest.main()
