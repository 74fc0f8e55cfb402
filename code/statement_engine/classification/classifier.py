"""
classifier.py

Deterministic, explainable transaction classifier for Indian bank statements.

Key invariants enforced:
- Payment rail (UPI/NEFT/ACH/...) is NOT economic meaning; it only seeds the
  provisional method and is reported as the channel.
- Salary / interest / dividend credits can never land in a spend category.
- A credit never lands in an expense category (refund, investment return or
  income instead).
- Transfers to people and to the customer's own accounts are Self_Transfer,
  whatever merchant or intent keywords the narration carries.
- Every row gets exactly one Method and one Category; Other is the fallback
  and carries a diagnostic reason.

Signals (computed once per row):
  normalize -> rail -> gateway/wallet -> beneficiary -> merchant -> intent

Rules (single-pass, priority-ordered, first hit wins):
  R00 reversal, R01 salary, R02 interest, R03 dividend, R04 reimbursement,
  R05 FD principal, R06 self transfer, R07 RD/FD/SIP/investment platforms,
  R08 insurance, R09 EMI / ACH-to-bank, R10 ATM, R11 tax, R12 bill payment,
  R13 online shopping, R14 debit card, then the generic merchant/intent
  fallback behind the negative filter (R15..R19).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..cancellation import CancellationToken, check_cancelled
from ..config import DEFAULT_CONFIG, RULE_VERSION, AnalyzerConfig
from ..dates import parse_date
from ..logging_setup import get_logger
from ..models import (
    Category,
    ClassificationMetadata,
    ClassifiedTransaction,
    Method,
    Rail,
    RawTransaction,
)
from . import rules as R
from .beneficiary import extract_beneficiary
from .gateways import BILL_GATEWAYS, detect_gateway, detect_wallet
from .intent import IntentScores, score_intent
from .merchants import CATEGORY_CONFIDENCE, MerchantMatch, canonicalize
from .negative import P_TRANSFER, check_transfer, match_names
from .normalize import NormalizedNarration, first_match, has_any, normalize_narration
from .rails import AUTO_DEBIT_RAILS, detect_rail, is_ach_debit, rail_method

log = get_logger("statement_engine.classification")

UNKNOWN_MERCHANT = "Unknown"
COUNTERPARTY_MAX_LEN = 40
FALLBACK_CONFIDENCE = 0.2


# ======================================================
# CLASSIFICATION RESULT
# ======================================================

@dataclass(frozen=True)
class ClassResult:
    method: Method
    category: Category
    merchant: str
    beneficiary: str
    counterparty: str
    rail: Rail
    gateway: str
    wallet: str
    confidence: float
    matched_keywords: Tuple[str, ...]
    rule_id: str
    rule_explanation: str

    def metadata(self) -> ClassificationMetadata:
        return ClassificationMetadata(
            confidence=self.confidence,
            matched_keywords=self.matched_keywords,
            gateway=self.gateway,
            wallet=self.wallet,
            channel=self.rail.value,
            rule_version=RULE_VERSION,
            rule_id=self.rule_id,
            reason=self.rule_explanation,
        )


@dataclass(frozen=True)
class _Signals:
    narration: NormalizedNarration
    rail: Rail
    gateway: str
    wallet: str
    beneficiary: str
    merchant: Optional[MerchantMatch]
    intent: IntentScores
    is_credit: bool
    amount: float

    @property
    def d(self) -> str:
        return self.narration.upper

    @property
    def strong_merchant(self) -> Optional[MerchantMatch]:
        m = self.merchant
        if m is not None and m.match_type != "fuzzy" and m.confidence >= CATEGORY_CONFIDENCE:
            return m
        return None


# ======================================================
# HELPERS
# ======================================================

def _clamp(x: float) -> float:
    return max(0.0, min(1.0, x))


def _counterparty(merchant: str, beneficiary: str, text: str) -> str:
    if merchant and merchant != UNKNOWN_MERCHANT:
        return merchant
    if beneficiary:
        return beneficiary
    return text[:COUNTERPARTY_MAX_LEN].strip()


def _result(
    s: _Signals,
    method: Method,
    category: Category,
    confidence: float,
    rule_id: str,
    explanation: str,
    keywords: Sequence[str] = (),
    extra_confidence: Sequence[float] = (),
) -> ClassResult:
    merchant = s.merchant.name if s.merchant is not None else UNKNOWN_MERCHANT
    kws: List[str] = []
    for k in keywords:
        if k and k not in kws:
            kws.append(k)
    return ClassResult(
        method=method,
        category=category,
        merchant=merchant,
        beneficiary=s.beneficiary,
        counterparty=_counterparty(merchant, s.beneficiary, s.narration.text),
        rail=s.rail,
        gateway=s.gateway,
        wallet=s.wallet,
        confidence=_clamp(min([confidence, *extra_confidence])),
        matched_keywords=tuple(kws),
        rule_id=rule_id,
        rule_explanation=explanation,
    )


def _matches_customer(s: _Signals, customer_name: str) -> bool:
    if not customer_name.strip():
        return False
    if s.beneficiary and match_names(s.beneficiary, customer_name):
        return True
    words = customer_name.upper().split()
    if len(words) >= 2:
        full = " ".join(w for w in words if w.rstrip(".") not in {"MR", "MRS", "MS", "DR", "PROF"})
        return bool(full) and full in s.narration.text
    return False


def _investment_code_allowed(d: str) -> bool:
    return not has_any(d, R.P_INVESTMENT_CODE_EXCL)


# ======================================================
# CLASSIFIER (single-pass, priority-ordered)
# ======================================================

def classify_row(
    narration: str,
    debit: float,
    credit: float,
    customer_name: str = "",
    employer_patterns: Sequence = (),
    salary_threshold: float = DEFAULT_CONFIG.salary_auto_detect_threshold,
) -> ClassResult:
    n = normalize_narration(narration)
    d = n.upper
    rail = detect_rail(d)
    s = _Signals(
        narration=n,
        rail=rail,
        gateway=detect_gateway(d),
        wallet=detect_wallet(d),
        beneficiary=extract_beneficiary(d, rail),
        merchant=canonicalize(n.text, n.tokens),
        intent=score_intent(n.text),
        is_credit=credit > debit,
        amount=abs(credit - debit),
    )
    base_method = rail_method(rail)

    # 0) Reversals are refunds on the original rail
    if s.is_credit and has_any(d, R.P_REVERSAL):
        kw = first_match(d, R.P_REVERSAL)
        return _result(s, base_method, Category.REFUND, 0.95, "R00_REVERSAL",
                       f"Reversal/refund detected ({kw}).", ["REFUND", kw])

    # 1) Salary (hard-protect)
    if s.is_credit:
        kw = first_match(d, R.P_SALARY)
        if kw:
            return _result(s, Method.SALARY, Category.SALARY, 0.98, "R01_SALARY",
                           f"Salary credit (keyword: {kw}). Income can never be classified as spend.",
                           ["SALARY", kw])
        employer = first_match(d, list(employer_patterns))
        if employer and s.amount >= salary_threshold:
            return _result(s, Method.SALARY, Category.SALARY, 0.9, "R01_SALARY_EMPLOYER",
                           f"Large credit from configured employer ({employer}).",
                           ["SALARY", employer])

    # 2) Interest income
    if s.is_credit and has_any(d, R.P_INTEREST):
        kw = first_match(d, R.P_INTEREST)
        return _result(s, Method.INTEREST, Category.INCOME, 0.95, "R02_INTEREST",
                       "Interest credited. Income.", ["INTEREST", kw])

    # 3) Dividend income
    if s.is_credit and has_any(d, R.P_DIVIDEND):
        kw = first_match(d, R.P_DIVIDEND)
        return _result(s, Method.DIVIDEND, Category.INCOME, 0.95, "R03_DIVIDEND",
                       "Dividend credited. Income.", ["DIVIDEND", kw])

    # 4) Loan EMI reimbursement (employer pays back the staff loan EMI)
    if s.is_credit and has_any(d, R.P_REIMBURSEMENT):
        kw = first_match(d, R.P_REIMBURSEMENT)
        return _result(s, base_method, Category.REIMBURSEMENT, 0.95, "R04_REIMBURSEMENT",
                       "Loan EMI reimbursement credit.", ["REIMBURSEMENT", kw])

    # 5) FD premature closure principal
    if has_any(d, R.P_FD_PRINCIPAL):
        return _result(s, Method.FD, Category.INVESTMENT, 0.95, "R05_FD_PRINCIPAL",
                       "FD premature closure principal (investment movement).",
                       ["FD", "PRINCIPAL"])

    # 6) Self transfers (own accounts, explicit phrasing, internal fund codes)
    phrase = first_match(d, P_TRANSFER)
    if phrase:
        return _result(s, Method.SELF_TRANSFER, Category.SELF_TRANSFER, 0.95, "R06_SELF_TRANSFER_PHRASE",
                       f"Explicit transfer phrase ({phrase}).", ["SELF_TRANSFER", phrase])
    if has_any(d, R.P_INTERNAL_FUND):
        return _result(s, Method.SELF_TRANSFER, Category.SELF_TRANSFER, 0.98, "R06_SELF_TRANSFER_INF",
                       "Internal fund transfer code (INF/INFT).", ["SELF_TRANSFER", "INF"])
    if has_any(d, R.P_OWN):
        return _result(s, Method.SELF_TRANSFER, Category.SELF_TRANSFER, 0.95, "R06_SELF_TRANSFER_OWN",
                       "Own-account marker in narration.", ["SELF_TRANSFER", "OWN"])
    if rail in (Rail.IMPS, Rail.NEFT, Rail.RTGS, Rail.UPI) and _matches_customer(s, customer_name):
        return _result(s, Method.SELF_TRANSFER, Category.SELF_TRANSFER, 0.97, "R06_SELF_TRANSFER_NAME",
                       "Counterparty matches the account holder.", ["SELF_TRANSFER", rail.value])

    # 7) Investments
    if _investment_code_allowed(d):
        kw = first_match(d, R.P_RD)
        if kw:
            return _result(s, Method.RD, Category.INVESTMENT, 0.98, "R07_RD",
                           "Recurring deposit.", ["RD", kw])
        kw = first_match(d, R.P_FD)
        if kw:
            return _result(s, Method.FD, Category.INVESTMENT, 0.98, "R07_FD",
                           "Fixed deposit.", ["FD", kw])
        kw = first_match(d, R.P_SIP)
        if kw:
            return _result(s, Method.SIP, Category.INVESTMENT, 0.98, "R07_SIP",
                           "Systematic investment plan.", ["SIP", kw])
    kw = first_match(d, R.P_INVESTMENT_PLATFORM)
    if kw:
        return _result(s, Method.INVESTMENT, Category.INVESTMENT, 0.95, "R07_INVESTMENT_PLATFORM",
                       f"Investment platform / clearing corporation ({kw}).", ["INVESTMENT", kw])
    sm = s.strong_merchant
    if sm is not None and sm.category == Category.INVESTMENT:
        return _result(s, Method.INVESTMENT, Category.INVESTMENT, sm.confidence, "R07_INVESTMENT_MERCHANT",
                       f"Investment merchant {sm.name}.", ["INVESTMENT", sm.alias])

    # 8) Insurance premiums
    if not s.is_credit and has_any(d, R.P_INSURANCE):
        kw = first_match(d, R.P_INSURANCE)
        inv = first_match(d, R.P_INVESTMENT_INSURANCE)
        if inv:
            return _result(s, Method.INSURANCE, Category.INVESTMENT, 0.9, "R08_INSURANCE_INVESTMENT",
                           f"Investment-type insurance premium ({inv}).", ["INSURANCE", inv])
        return _result(s, Method.INSURANCE, Category.BILLS_UTILITIES, 0.9, "R08_INSURANCE",
                       f"Insurance premium ({kw}).", ["INSURANCE", kw])

    # 9) EMI / loan repayment
    if not s.is_credit:
        kw = first_match(d, R.P_EMI)
        if kw and rail in AUTO_DEBIT_RAILS:
            return _result(s, Method.EMI, Category.LOAN, 0.95, "R09_EMI_AUTO_DEBIT",
                           f"{rail.value} auto-debit for a loan ({kw}).", ["EMI", kw, rail.value])
        if kw:
            return _result(s, Method.EMI, Category.LOAN, 0.9, "R09_EMI",
                           f"Loan repayment keyword ({kw}).", ["EMI", kw])
        if rail == Rail.ACH and is_ach_debit(d) and has_any(d, R.P_ACH_BANK):
            bank = first_match(d, R.P_ACH_BANK)
            card = first_match(d, R.P_CREDIT_CARD)
            if card:
                return _result(s, Method.ACH, Category.BILLS_UTILITIES, 0.9, "R09_ACH_CREDIT_CARD",
                               f"ACH debit to {bank} for a card bill.", ["CREDIT_CARD", "ACH_D", card])
            return _result(s, Method.EMI, Category.LOAN, 0.85, "R09_ACH_BANK",
                           f"ACH debit to {bank}; likely loan repayment.", ["ACH_D", "BANK", bank])

    # 10) ATM cash
    if not s.is_credit and has_any(d, R.P_ATM):
        kw = first_match(d, R.P_ATM)
        return _result(s, Method.ATM_WITHDRAWAL, Category.OTHER, 0.95, "R10_ATM",
                       f"ATM cash withdrawal ({kw}).", ["ATM", kw])

    # 11) Tax
    if not s.is_credit and has_any(d, R.P_TAX):
        kw = first_match(d, R.P_TAX)
        return _result(s, Method.TAX_PAYMENT, Category.BILLS_UTILITIES, 0.95, "R11_TAX",
                       f"Tax payment ({kw}).", ["TAX_PAYMENT", kw])

    # 12) Bill payment codes and bill gateways
    if not s.is_credit and (has_any(d, R.P_BILL_PAYMENT) or s.gateway in BILL_GATEWAYS):
        kw = first_match(d, R.P_BILL_PAYMENT) or s.gateway
        return _result(s, base_method, Category.BILLS_UTILITIES, 0.9, "R12_BILL_PAYMENT",
                       f"Bill payment ({kw}).", ["BILL_PAYMENT", kw])

    # 13) Online shopping code
    if not s.is_credit and has_any(d, R.P_ONLINE_SHOPPING):
        return _result(s, Method.ONLINE_SHOPPING, Category.SHOPPING, 0.9, "R13_ONLINE_SHOPPING",
                       "Online shopping code (ONL).", ["ONLINE_SHOPPING", "ONL"])

    # 14) Card spend: merchant category when known, else Shopping
    if not s.is_credit and (rail == Rail.POS or has_any(d, R.P_DEBIT_CARD)):
        if sm is not None:
            return _result(s, Method.DEBIT_CARD, sm.category, sm.confidence, "R14_DEBIT_CARD_MERCHANT",
                           f"Card spend at {sm.name}.", ["POS", sm.alias])
        best = s.intent.best()
        if best is not None:
            cat, weight = best
            return _result(s, Method.DEBIT_CARD, cat, weight, "R14_DEBIT_CARD_INTENT",
                           f"Card spend; intent {cat.value}.", ["POS", *s.intent.keywords_for(cat)])
        return _result(s, Method.DEBIT_CARD, Category.SHOPPING, 0.6, "R14_DEBIT_CARD",
                       "Card spend with no merchant evidence.", ["POS"])

    return _fallback(s, base_method)


def _fallback(s: _Signals, base_method: Method) -> ClassResult:
    """Generic merchant/intent evidence, behind the negative filter."""
    sm = s.strong_merchant
    best = s.intent.best()

    # 15) Negative filter: transfers to people are not spend
    if sm is None:
        verdict = check_transfer(s.d, s.beneficiary, s.amount, s.rail)
        if verdict.is_transfer:
            demoted = f"; demoted intent {best[0].value}" if best is not None else ""
            return _result(s, Method.SELF_TRANSFER, Category.SELF_TRANSFER, 0.85, "R15_P2P_TRANSFER",
                           f"Person-to-person transfer: {verdict.reason}{demoted}.",
                           ["SELF_TRANSFER", verdict.keyword])

    # 16) Credits never land in an expense category
    if s.is_credit:
        upper_merchant = sm.name.upper() if sm is not None else ""
        refund = next((m for m in R.REFUND_MERCHANTS if m in s.d or m in upper_merchant), "")
        if refund:
            return _result(s, base_method, Category.REFUND, 0.9, "R16_CREDIT_REFUND",
                           f"Credit from shopping merchant ({refund}); refund.", ["REFUND", refund])
        inv = first_match(s.d, R.P_INVESTMENT_RETURN)
        if inv:
            return _result(s, base_method, Category.INVESTMENT, 0.85, "R16_CREDIT_INVESTMENT",
                           f"Credit with investment keyword ({inv}); investment return.",
                           ["INVESTMENT", inv])
        return _result(s, base_method, Category.INCOME, 0.8, "R16_CREDIT_INCOME",
                       "Credit with no specific evidence; income.", ["CREDIT"])

    # 17) Canonical merchant fixes the category
    if sm is not None:
        return _result(s, base_method, sm.category, sm.confidence, "R17_MERCHANT",
                       f"Canonical merchant {sm.name} ({sm.match_type} match on {sm.alias}).",
                       [sm.alias])

    # 18) Intent keywords
    if best is not None:
        cat, weight = best
        extra = [s.merchant.confidence] if s.merchant is not None else []
        return _result(s, base_method, cat, weight, "R18_INTENT",
                       f"Intent keywords suggest {cat.value}.",
                       list(s.intent.keywords_for(cat)), extra)

    # 19) Fallback
    return _result(s, base_method, Category.OTHER, FALLBACK_CONFIDENCE, "R19_FALLBACK",
                   f"No rule, merchant or intent keyword matched ({s.rail.value} rail).", [])


# ======================================================
# BATCH
# ======================================================

def classify_transaction(
    index: int,
    raw: RawTransaction,
    customer_name: str = "",
    employer_patterns: Sequence = (),
    salary_threshold: float = DEFAULT_CONFIG.salary_auto_detect_threshold,
) -> Optional[ClassifiedTransaction]:
    """Classify one raw row; None when the row is malformed (bad date, no amount)."""
    txn_date = parse_date(raw.date)
    if txn_date is None:
        log.debug("skip row %d: unparseable date %r", index, raw.date)
        return None
    if raw.withdrawal_amount == 0 and raw.deposit_amount == 0:
        log.debug("skip row %d: both amounts zero", index)
        return None

    res = classify_row(
        raw.narration,
        debit=raw.withdrawal_amount,
        credit=raw.deposit_amount,
        customer_name=customer_name,
        employer_patterns=employer_patterns,
        salary_threshold=salary_threshold,
    )
    return ClassifiedTransaction(
        index=index,
        raw=raw,
        txn_date=txn_date,
        method=res.method,
        category=res.category,
        merchant=res.merchant,
        beneficiary=res.beneficiary,
        counterparty=res.counterparty,
        metadata=res.metadata(),
    )


def classify_rows(
    rows: Sequence[RawTransaction],
    customer_name: str = "",
    config: Optional[AnalyzerConfig] = None,
    token: Optional[CancellationToken] = None,
) -> Tuple[List[ClassifiedTransaction], int]:
    """
    Classify a statement.

    Returns:
        (classified rows in input order, number of skipped malformed rows)
    """
    cfg = config or DEFAULT_CONFIG
    employers = R.employer_patterns(cfg.employer_names)
    check_cancelled(token, "classification")

    out: List[ClassifiedTransaction] = []
    skipped = 0
    for i, raw in enumerate(rows):
        txn = classify_transaction(i, raw, customer_name, employers, cfg.salary_auto_detect_threshold)
        if txn is None:
            skipped += 1
            continue
        out.append(txn)

    check_cancelled(token, "classification")
    log.debug("classified %d rows (%d skipped)", len(out), skipped)
    return out, skipped
