import os
from pathlib import Path
from typing import List

import pandas as pd
from dotenv import load_dotenv

from ..models import RawTransaction, StatementMeta
from .config import Settings, build_settings

REQUIRED_COLS = {
    "Date", "Narration", "Withdrawal_Amount", "Deposit_Amount", "Closing_Balance"
}
TEXT_COLS = ["Date", "Narration", "Chq_Ref_No", "Value_Date"]
AMOUNT_COLS = ["Withdrawal_Amount", "Deposit_Amount", "Closing_Balance"]


def _env_amount(name: str) -> float:
    raw = os.getenv(name, "").replace(",", "").strip()
    if not raw:
        return 0.0
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be numeric (got {raw!r})") from None


def load_meta() -> StatementMeta:
    return StatementMeta(
        account_no=os.getenv("STATEMENT_ACCOUNT_NO", ""),
        customer_name=os.getenv("STATEMENT_CUSTOMER_NAME", ""),
        statement_period=os.getenv("STATEMENT_PERIOD", ""),
        opening_balance=_env_amount("STATEMENT_OPENING_BALANCE"),
        closing_balance=_env_amount("STATEMENT_CLOSING_BALANCE"),
    )


def load_settings(input_csv=None, output_dir=None) -> Settings:
    load_dotenv()
    input_csv = input_csv or os.getenv("ANALYSIS_INPUT_CSV")
    output_dir = output_dir or os.getenv("ANALYSIS_OUTPUT_DIR")
    if not input_csv or not output_dir:
        raise ValueError("ANALYSIS_INPUT_CSV and ANALYSIS_OUTPUT_DIR must be provided")
    return build_settings(input_csv, output_dir, load_meta())


def ensure_dirs(s: Settings):
    s.output_dir.mkdir(parents=True, exist_ok=True)
    s.charts_dir.mkdir(parents=True, exist_ok=True)
    s.tables_dir.mkdir(parents=True, exist_ok=True)


def load_statement(path: Path) -> List[RawTransaction]:
    """Parsed statement rows from CSV; dates stay strings so output echoes them."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = REQUIRED_COLS - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {sorted(missing)}")

    for col in TEXT_COLS:
        if col not in df.columns:
            df[col] = ""
    for col in AMOUNT_COLS:
        cleaned = df[col].str.replace(",", "", regex=False).str.strip()
        df[col] = pd.to_numeric(cleaned, errors="coerce").fillna(0.0)

    return [
        RawTransaction(
            date=r.Date.strip(),
            narration=r.Narration,
            withdrawal_amount=abs(float(r.Withdrawal_Amount)),
            deposit_amount=abs(float(r.Deposit_Amount)),
            closing_balance=float(r.Closing_Balance),
            cheque_ref_no=r.Chq_Ref_No,
            value_date=r.Value_Date,
        )
        for r in df.itertuples(index=False)
    ]
