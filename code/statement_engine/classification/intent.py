"""
intent.py

Weighted keyword -> category intent scoring.

Each (keyword, category, weight) with weight in [0.2, 0.5]. A category's
score is the highest weight among its matching keywords; keywords match on
word boundaries of the cleaned narration.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..models import Category

C = Category

INTENT_KEYWORDS: List[Tuple[str, Category, float]] = [
    # Bills & utilities
    ("BILL", C.BILLS_UTILITIES, 0.3),
    ("UTILITY PAYMENT", C.BILLS_UTILITIES, 0.4),
    ("RECHARGE", C.BILLS_UTILITIES, 0.3),
    ("PREPAID", C.BILLS_UTILITIES, 0.3),
    ("POSTPAID", C.BILLS_UTILITIES, 0.3),
    ("BROADBAND", C.BILLS_UTILITIES, 0.3),
    ("RENT", C.BILLS_UTILITIES, 0.4),
    ("MAINTENANCE", C.BILLS_UTILITIES, 0.3),
    ("SOCIETY", C.BILLS_UTILITIES, 0.2),

    # Investment
    ("INSTALLMENT", C.INVESTMENT, 0.3),
    ("SIP", C.INVESTMENT, 0.4),
    ("RD", C.INVESTMENT, 0.4),
    ("FD", C.INVESTMENT, 0.4),
    ("MUTUAL FUND", C.INVESTMENT, 0.5),
    ("STOCK", C.INVESTMENT, 0.4),
    ("SHARE", C.INVESTMENT, 0.4),
    ("DIVIDEND", C.INVESTMENT, 0.5),

    # Loan
    ("EMI", C.LOAN, 0.5),
    ("LOAN", C.LOAN, 0.4),
    ("OVERDUE", C.LOAN, 0.4),
    ("RECOVERED", C.LOAN, 0.3),

    # Fuel
    ("FUEL", C.FUEL, 0.4),
    ("PETROL", C.FUEL, 0.4),
    ("DIESEL", C.FUEL, 0.4),
    ("SERVICE STATION", C.FUEL, 0.3),
    ("PETROL PUMP", C.FUEL, 0.4),

    # Travel
    ("TRAVEL", C.TRAVEL, 0.3),
    ("FLIGHT", C.TRAVEL, 0.4),
    ("HOTEL", C.TRAVEL, 0.3),
    ("CAB", C.TRAVEL, 0.3),
    ("TAXI", C.TRAVEL, 0.3),
    ("BOOKING", C.TRAVEL, 0.3),

    # Food delivery
    ("ORDER", C.FOOD_DELIVERY, 0.2),
    ("FOOD DELIVERY", C.FOOD_DELIVERY, 0.4),
    ("ONLINE FOOD", C.FOOD_DELIVERY, 0.3),

    # Dining
    ("RESTAURANT", C.DINING, 0.3),
    ("CAFE", C.DINING, 0.3),
    ("DINING", C.DINING, 0.3),
    ("EATERY", C.DINING, 0.3),
    ("BAKERY", C.DINING, 0.3),

    # Shopping
    ("SHOPPING", C.SHOPPING, 0.2),
    ("PURCHASE", C.SHOPPING, 0.2),
    ("STORE", C.SHOPPING, 0.2),
    ("SHOP", C.SHOPPING, 0.2),

    # Groceries
    ("GROCERY", C.GROCERIES, 0.3),
    ("GROCERIES", C.GROCERIES, 0.3),
    ("SUPERMARKET", C.GROCERIES, 0.3),
    ("KIRANA", C.GROCERIES, 0.3),
    ("VEGETABLE", C.GROCERIES, 0.3),
    ("FRUIT", C.GROCERIES, 0.3),

    # Healthcare
    ("MEDICAL", C.HEALTHCARE, 0.3),
    ("PHARMACY", C.HEALTHCARE, 0.4),
    ("HOSPITAL", C.HEALTHCARE, 0.4),
    ("CLINIC", C.HEALTHCARE, 0.3),
    ("DOCTOR", C.HEALTHCARE, 0.3),
    ("HEALTH", C.HEALTHCARE, 0.2),

    # Entertainment
    ("MOVIE", C.ENTERTAINMENT, 0.3),
    ("CINEMA", C.ENTERTAINMENT, 0.3),
    ("MUSIC", C.ENTERTAINMENT, 0.2),
    ("GAME", C.ENTERTAINMENT, 0.2),
    ("GAMING", C.ENTERTAINMENT, 0.3),

    # Education
    ("SCHOOL", C.EDUCATION, 0.3),
    ("COLLEGE", C.EDUCATION, 0.3),
    ("UNIVERSITY", C.EDUCATION, 0.3),
    ("EDUCATION", C.EDUCATION, 0.3),
    ("COURSE", C.EDUCATION, 0.3),
    ("TUITION", C.EDUCATION, 0.4),
]

P_INTENT = [
    (kw, cat, weight, re.compile(r"\b" + re.escape(kw) + r"\b"))
    for kw, cat, weight in INTENT_KEYWORDS
]


@dataclass(frozen=True)
class IntentScores:
    scores: Dict[Category, float]
    matched: Tuple[str, ...]

    def best(self) -> Optional[Tuple[Category, float]]:
        """Highest-scoring category; ties go to the category listed first."""
        best: Optional[Tuple[Category, float]] = None
        for cat, score in self.scores.items():
            if best is None or score > best[1]:
                best = (cat, score)
        return best

    def keywords_for(self, category: Category) -> Tuple[str, ...]:
        return tuple(kw for kw, cat, _, _ in P_INTENT if cat == category and kw in self.matched)


def score_intent(text: str) -> IntentScores:
    scores: Dict[Category, float] = {}
    matched: List[str] = []
    for kw, cat, weight, pat in P_INTENT:
        if pat.search(text):
            matched.append(kw)
            if weight > scores.get(cat, 0.0):
                scores[cat] = weight
    return IntentScores(scores=scores, matched=tuple(matched))
