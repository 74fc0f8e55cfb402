"""
rules.py

Pattern lists for the priority-ordered classifier (classifier.py).

Patterns run against NormalizedNarration.upper (punctuation kept), so codes
like "REV-UPI" and "ACH D-" can be matched literally. Keep lists explicit and
auditable; the classifier decides priority, this module only says what each
rule looks for.
"""

from __future__ import annotations

import re
from typing import List, Sequence

from .normalize import compile_patterns


# ======================================================
# CREDIT-SIDE RULES
# ======================================================

REVERSAL_PATTERNS = [
    r"\bREV[\s\-]UPI\b",
    r"\bREV[\s\-]IMPS\b",
    r"\bUPI\s+(?:REVERSAL|REV|REFUND)\b",
    r"\bIMPS\s+(?:REVERSAL|REV|REFUND)\b",
    r"\bCRV\s+POS\b",
    r"\bPOS\s+(?:REVERSAL|REFUND)\b",
    r"\bCARD\s+(?:REVERSAL|REFUND)\b",
    r"\bREVERSAL\b",
]

SALARY_PATTERNS = [
    r"\bSALARY\b",
    r"\bSAL\s+FOR\b",
    r"\bPAYROLL\b",
    r"\bWAGES\b",
    r"\bBONUS\b",
]

INTEREST_PATTERNS = [
    r"\bINTEREST\b",
    r"\bINT\.?\s*PD\b",
    r"\bFD\s+PREMAT\w*\s+INT\s+PAID\b",
]

DIVIDEND_PATTERNS = [
    r"\bDIV\b",
    r"\bDIVIDEND\b",
    r"\bDIV\s*CR\b",
]

REIMBURSEMENT_PATTERNS = [
    r"\bSTAFF\s+LOAN\s+EMI\s+REC\b",
    r"\bLOAN\s+EMI\s+REC\b",
    r"\bEMI\s+REC\b",
    r"\bEMI\s+REIMB\w*",
    r"\bLOAN\s+REC\b",
]

FD_PRINCIPAL_PATTERNS = [
    r"\bFD\s+PREMAT\w*\b.*\bPRINCIPAL\b",
]

# Known shopping merchants whose credits are refunds, not income
REFUND_MERCHANTS = [
    "AMAZON", "FLIPKART", "MYNTRA", "AJIO", "MEESHO", "NYKAA",
    "ZARA", "HNM", "SHOPPERS STOP", "LIFESTYLE", "PANTALOONS",
    "CROMA", "RELIANCE DIGITAL", "VIJAY SALES", "SIMPL",
]

INVESTMENT_RETURN_PATTERNS = [
    r"\bINVESTMENT\b", r"\bBROKERAGE\b", r"\bDEMAT\b", r"\bTRADING\b",
    r"\bMUTUAL\s+FUND\b", r"\bSIP\b", r"\bSTOCKS?\b", r"\bSHARES?\b",
    r"\bSECURITIES\b", r"\bBROKING\b", r"\bBROKER\b",
    r"\bFD\b", r"\bFIXED\s+DEPOSIT\b", r"\bRD\b", r"\bRECURRING\s+DEPOSIT\b",
    r"\bPPF\b", r"\bNPS\b", r"\bZERODHA\b", r"\bUPSTOX\b", r"\bGROWW\b",
]


# ======================================================
# SELF TRANSFER
# ======================================================

OWN_ACCOUNT_PATTERNS = [
    r"(?:^|[\s\-])OWN(?:$|[\s\-])",
]

INTERNAL_FUND_PATTERNS = [
    r"(?:^|[\s\-/])INFT?(?:[\s\-/]|$)",
    r"\bINTERNET\s+FUND\s+TRANSFER\s+IN\s+LINKED\s+ACCOUNTS\b",
    r"\bINTERNAL\s+FUND\s+TRANSFER\b",
]


# ======================================================
# INVESTMENTS
# ======================================================

RD_PATTERNS = [
    r"(?:^|[\s\-])RD(?:[\s\-]|$)",
    r"\bRD\s+INSTAL+MENT\b",
    r"\bRECURRING\s+DEPOSIT\b",
]

FD_PATTERNS = [
    r"\bFD\s+THROUGH\b",
    r"\bFD\s+PREMAT",
    r"\bFIXED\s+DEPOSIT\b",
    r"(?:^|[\s\-])FD(?:[\s\-]|$)",
]

SIP_PATTERNS = [
    r"(?:^|[\s\-])SIP(?:[\s\-]|$)",
    r"\bSYSTEMATIC\s+INVESTMENT\b",
]

# RD/FD/SIP codes collide with UPI references (PAYTMQRD...), so UPI rows are excluded
INVESTMENT_CODE_EXCLUSIONS = [
    r"PAYTMQRD",
    r"\bUPI\b",
]

INVESTMENT_PLATFORM_PATTERNS = [
    r"\bINDIAN\s+C\s?LEARING\s+CORP",
    r"\bCLEARING\s+CORP",
    r"\bICCL\b",
    r"\bNSDL\b",
    r"\bCDSL\b",
    r"\bZERODHA",
    r"\bKITE\b",
    r"\bGROWW\b",
    r"\bUPSTOX\b",
    r"\bHSL\s+SEC\b",
    r"^EBA\b",
    r"\bEBA[\s\-]",
    r"\bSGB\b",
    r"\bSOVEREIGN\s+GOLD\s+BOND\b",
    r"\bMUTUAL\s+FUND\b",
    r"\bANGEL\s+BROKING\b",
    r"\b(?:ICICI|HDFC|KOTAK)\s+SECURITIES\b",
    r"\bSHAREKHAN\b",
    r"\bMOTILAL\s+OSWAL\b",
    r"\bIIFL\b",
    r"\b5PAISA\b",
]


# ======================================================
# DEBIT-SIDE RULES
# ======================================================

INSURANCE_PATTERNS = [
    r"\bHLIC",
    r"\bHDFC\s+LIFE\b",
    r"\bLIC\b",
    r"\bINSURANCE\b",
    r"\bPREMIUM\b",
    r"\bMAXLIFE",
    r"\bSBI\s+LIFE\b",
    r"\bICICI\s+PRU",
    r"\bBAJAJ\s+ALLIANZ\b",
]

INVESTMENT_INSURANCE_PATTERNS = [
    r"\bULIP\b",
    r"\bENDOWMENT\b",
    r"\bWHOLE\s+LIFE\b",
    r"\bMONEY\s+BACK\b",
    r"\bPENSION\s+PLAN\b",
    r"\bRETIREMENT\b",
    r"\bSAVINGS\s+PLAN\b",
]

EMI_PATTERNS = [
    r"\bEMI\b",
    r"\bLOAN\b",
    r"\bREPAYMENT\b",
    r"\bLNPY\b",
    r"\bLINKED\s+LOAN\s+PAYMENT\b",
]

# ACH debits to a bank with no other hint are loan or card repayments
ACH_BANK_PATTERNS = [
    r"\bHDFC\s+BANK\b",
    r"\bICICI\s+BANK\b",
    r"\bSBI\b",
    r"\bSTATE\s+BANK\b",
    r"\bAXIS\s+BANK\b",
    r"\bKOTAK\b",
    r"\bYES\s+BANK\b",
    r"\bIDFC\b",
    r"\bPNB\b",
]

CREDIT_CARD_PATTERNS = [
    r"\bCREDIT\s+CARD\b",
    r"\bCC\b",
    r"\bCARD\s+BILL\b",
    r"\bCARD\s+PAYMENT\b",
]

ATM_PATTERNS = [
    r"\bEAW\b",
    r"\bATW\b",
    r"\bNWD\b",
    r"\bATM\s+WDL\b",
    r"\bATM\s+(?:CASH\s+)?WITHDRAWAL\b",
    r"\bATM\s+CASH\b",
    r"\bNFS\b",
    r"\bCCWD\b",
    r"\bCASH\s+WITHDRAWAL\b",
]

TAX_PATTERNS = [
    r"\bDTAX\b",
    r"\bIDTX\b",
    r"\bDIRECT\s+TAX\b",
    r"\bINDIRECT\s+TAX\b",
    r"\bINCOME\s+TAX\b",
    r"\bADVANCE\s+TAX\b",
    r"\bGST\s+PMT\b",
]

BILL_PAYMENT_PATTERNS = [
    r"\bBILLPAY\b",
    r"\bBPAY\b",
    r"\bBBPS\b",
    r"\bBILL\s+PAYMENT\b",
    r"\bRCHG\b",
    r"\bPAVC\b",
    r"\bPAY\s+ANY\s+VISA\s+CREDIT\s+CARD\b",
]

ONLINE_SHOPPING_PATTERNS = [
    r"(?:^|[\s\-/])ONL(?:[\s\-/]|$)",
    r"\bONLINE\s+SHOPPING\b",
]

DEBIT_CARD_PATTERNS = [
    r"\bDEBIT\s+CARD\b",
    r"\bCARD\s+TRANSACTION\b",
    r"\bSWIPE\b",
]


# ======================================================
# COMPILED PATTERNS (compile once)
# ======================================================

P_REVERSAL = compile_patterns(REVERSAL_PATTERNS)
P_SALARY = compile_patterns(SALARY_PATTERNS)
P_INTEREST = compile_patterns(INTEREST_PATTERNS)
P_DIVIDEND = compile_patterns(DIVIDEND_PATTERNS)
P_REIMBURSEMENT = compile_patterns(REIMBURSEMENT_PATTERNS)
P_FD_PRINCIPAL = compile_patterns(FD_PRINCIPAL_PATTERNS)
P_INVESTMENT_RETURN = compile_patterns(INVESTMENT_RETURN_PATTERNS)

P_OWN = compile_patterns(OWN_ACCOUNT_PATTERNS)
P_INTERNAL_FUND = compile_patterns(INTERNAL_FUND_PATTERNS)

P_RD = compile_patterns(RD_PATTERNS)
P_FD = compile_patterns(FD_PATTERNS)
P_SIP = compile_patterns(SIP_PATTERNS)
P_INVESTMENT_CODE_EXCL = compile_patterns(INVESTMENT_CODE_EXCLUSIONS)
P_INVESTMENT_PLATFORM = compile_patterns(INVESTMENT_PLATFORM_PATTERNS)

P_INSURANCE = compile_patterns(INSURANCE_PATTERNS)
P_INVESTMENT_INSURANCE = compile_patterns(INVESTMENT_INSURANCE_PATTERNS)
P_EMI = compile_patterns(EMI_PATTERNS)
P_ACH_BANK = compile_patterns(ACH_BANK_PATTERNS)
P_CREDIT_CARD = compile_patterns(CREDIT_CARD_PATTERNS)
P_ATM = compile_patterns(ATM_PATTERNS)
P_TAX = compile_patterns(TAX_PATTERNS)
P_BILL_PAYMENT = compile_patterns(BILL_PAYMENT_PATTERNS)
P_ONLINE_SHOPPING = compile_patterns(ONLINE_SHOPPING_PATTERNS)
P_DEBIT_CARD = compile_patterns(DEBIT_CARD_PATTERNS)


def employer_patterns(employer_names: Sequence[str]) -> List[re.Pattern]:
    """Word-bounded patterns for configured employer names."""
    return compile_patterns(
        [r"\b" + re.escape(name.upper().strip()) + r"\b" for name in employer_names if name.strip()]
    )
