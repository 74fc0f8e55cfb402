"""
tax.py

Section 80C / 80D deduction hints from debit narrations.

80C: ELSS / mutual fund, NPS, PPF contributions (cap 150 000).
80D: insurance premiums (cap 25 000).
Potential save assumes the 30% bracket on the unused headroom.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from ..models import ClassifiedTransaction

SECTION_80C_CAP = 150000.0
SECTION_80D_CAP = 25000.0
TAX_BRACKET = 0.30

P_ELSS = re.compile(r"\b(?:ELSS|MUTUAL\s+FUND)\b")
P_NPS = re.compile(r"\b(?:NPS|NATIONAL\s+PENSION)\b")
P_PPF = re.compile(r"\b(?:PPF|PUBLIC\s+PROVIDENT)\b")
P_INSURANCE = re.compile(r"\b(?:INSURANCE|PREMIUM|LIC|HDFC\s+LIFE|MAXLIFE|SBI\s+LIFE)\b")


@dataclass(frozen=True)
class TaxInsights:
    potential_save: float = 0.0
    missed_deductions: List[str] = field(default_factory=list)
    section_80c_used: float = 0.0
    section_80d_used: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "potentialSave": round(self.potential_save, 2),
            "missedDeductions": list(self.missed_deductions),
            "section80CUsed": round(self.section_80c_used, 2),
            "section80DUsed": round(self.section_80d_used, 2),
        }


def tax_insights(txns: Sequence[ClassifiedTransaction]) -> TaxInsights:
    has_elss = has_nps = has_ppf = has_insurance = False
    invested = 0.0
    insured = 0.0
    for t in txns:
        if t.withdrawal <= 0:
            continue
        upper = t.narration.upper()
        amount = t.withdrawal
        if P_ELSS.search(upper):
            has_elss = True
            invested += amount
        if P_NPS.search(upper):
            has_nps = True
            invested += amount
        if P_PPF.search(upper):
            has_ppf = True
            invested += amount
        if P_INSURANCE.search(upper):
            has_insurance = True
            insured += amount

    used_80c = min(invested, SECTION_80C_CAP)
    used_80d = min(insured, SECTION_80D_CAP)
    potential = 0.0
    missed: List[str] = []
    if SECTION_80C_CAP - used_80c > 0:
        potential += (SECTION_80C_CAP - used_80c) * TAX_BRACKET
        missed.append("Invest in ELSS (Section 80C)")
    if SECTION_80D_CAP - used_80d > 0:
        potential += (SECTION_80D_CAP - used_80d) * TAX_BRACKET
        missed.append("Medical Insurance (Section 80D)")
    if not (has_elss or has_nps or has_ppf):
        missed.append("Start SIP in ELSS funds")
    if not has_insurance:
        missed.append("Consider term insurance")

    return TaxInsights(
        potential_save=potential,
        missed_deductions=missed,
        section_80c_used=used_80c,
        section_80d_used=used_80d,
    )
