from .analyzer import analyze
from .cancellation import AnalysisCancelled, CancellationToken
from .config import DEFAULT_CONFIG, RULE_VERSION, AnalyzerConfig
from .logging_setup import configure_logging, get_logger
from .models import (
    Category,
    ClassifiedTransaction,
    Method,
    Rail,
    RawTransaction,
    RecurringPayment,
    StatementMeta,
)
from .response import AnalyticsResponse

__all__ = [
    "AnalysisCancelled",
    "AnalyticsResponse",
    "AnalyzerConfig",
    "CancellationToken",
    "Category",
    "ClassifiedTransaction",
    "DEFAULT_CONFIG",
    "Method",
    "RULE_VERSION",
    "Rail",
    "RawTransaction",
    "RecurringPayment",
    "StatementMeta",
    "analyze",
    "configure_logging",
    "get_logger",
]
