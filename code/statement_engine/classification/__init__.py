from .classifier import ClassResult, classify_row, classify_rows, classify_transaction
from .merchants import canonicalize
from .normalize import normalize_narration
from .rails import detect_rail

__all__ = [
    "ClassResult",
    "canonicalize",
    "classify_row",
    "classify_rows",
    "classify_transaction",
    "detect_rail",
    "normalize_narration",
]
