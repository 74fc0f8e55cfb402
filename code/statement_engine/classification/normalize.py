"""
normalize.py

Narration cleanup for rule matching.

Bank-statement exports glue account metadata (branch address, IFSC, email,
nominee) onto the last narration of a page. That text poisons merchant
lookup, so it is cut off before anything else looks at the narration.

Outputs (NormalizedNarration):
- upper  : footer stripped, whitespace collapsed, uppercased; punctuation kept
           (rails, gateways and beneficiary regexes need '@', '-', '/').
- text   : upper with everything except word chars, whitespace and '-' blanked.
- tokens : text split on '/', '-', '_' and whitespace; tokens < 2 chars dropped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple


# ======================================================
# CONFIG
# ======================================================

FOOTER_MARKERS = [
    "ACCOUNT BRANCH :",
    "ADDRESS        :",
    "CITY           :",
    "STATE          :",
    "PHONE NO.      :",
    "EMAIL          :",
    "OD LIMIT       :",
    "ACCOUNT NO     :",
    "ACCOUNT STATUS :",
    "STATEMENT FROM :",
    "RTGS/NEFT IFSC :",
    "MICR :",
    "BRANCH CODE    :",
    "ACCOUNT TYPE   :",
    "JOINT HOLDERS :",
    "OPEN DATE  :",
    "NOMINATION :",
]

# Marker found this early is only a footer if account-detail words follow it
FOOTER_OFFSET = 200
FOOTER_DETAIL_WORDS = ("ACCOUNT", "BRANCH", "ADDRESS", "EMAIL")

MIN_TOKEN_LEN = 2


# ======================================================
# HELPERS
# ======================================================

def compile_patterns(raw_patterns: List[str]) -> List[re.Pattern]:
    return [re.compile(p) for p in raw_patterns]


def has_any(text: str, patterns: List[re.Pattern]) -> bool:
    return any(p.search(text) for p in patterns)


def first_match(text: str, patterns: List[re.Pattern]) -> str:
    for p in patterns:
        m = p.search(text)
        if m:
            return m.group(0).strip()
    return ""


def _collapse_ws(s: str) -> str:
    return " ".join(s.split())


_NON_WORD = re.compile(r"[^\w\s-]")
_TOKEN_SPLIT = re.compile(r"[/\-_\s]+")


# ======================================================
# NORMALIZER
# ======================================================

@dataclass(frozen=True)
class NormalizedNarration:
    upper: str
    text: str
    tokens: Tuple[str, ...]


def strip_footer(narration: str) -> str:
    """
    Cut narration at the first footer marker.

    A marker past FOOTER_OFFSET always cuts. An earlier marker only cuts when
    the remainder mentions account details, so a genuine narration that
    happens to contain "STATE" is left alone.
    """
    upper = narration.upper()
    cut = len(narration)
    for marker in FOOTER_MARKERS:
        idx = upper.find(marker)
        if idx < 0:
            continue
        if idx >= FOOTER_OFFSET:
            cut = min(cut, idx)
            continue
        tail = upper[idx + len(marker):]
        if idx > 0 and any(w in tail for w in FOOTER_DETAIL_WORDS):
            cut = min(cut, idx)
    return narration[:cut]


def clean_text(upper: str) -> str:
    return _collapse_ws(_NON_WORD.sub(" ", upper))


def tokenize(text: str) -> Tuple[str, ...]:
    return tuple(
        t for t in _TOKEN_SPLIT.split(text.upper()) if len(t) >= MIN_TOKEN_LEN
    )


def normalize_narration(narration: str) -> NormalizedNarration:
    stripped = strip_footer(narration or "")
    upper = _collapse_ws(stripped).upper()
    text = clean_text(upper)
    return NormalizedNarration(upper=upper, text=text, tokens=tokenize(text))
