"""
config.py

Per-call analyzer configuration.

- AnalyzerConfig is frozen and passed into analyze(); nothing is read from the
  environment inside the engine.
- RULE_VERSION is stamped into every row's classificationMetadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

RULE_VERSION = "v1.3.0"


@dataclass(frozen=True)
class AnalyzerConfig:
    big_ticket_threshold: float = 20000.0
    fraud_alert_threshold: float = 50000.0
    fraud_high_value_threshold: float = 100000.0
    unknown_vendor_threshold: float = 10000.0
    top_beneficiaries_limit: int = 5
    top_expenses_limit: int = 5
    top_anomalies_limit: int = 5
    min_rows_for_anomalies: int = 10
    salary_auto_detect_threshold: float = 50000.0
    employer_names: Tuple[str, ...] = field(default_factory=tuple)
    enable_predictive: bool = True
    enable_tax: bool = True
    enable_fraud: bool = True
    enable_anomaly: bool = True
    reference_date: Optional[date] = None

    def __post_init__(self) -> None:
        ok, errors = self.validate()
        if not ok:
            raise ValueError("Invalid AnalyzerConfig: " + "; ".join(errors))

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Check thresholds and limits.

        Returns:
            (is_valid, error_messages)

        Top-N limits may be zero or negative: they produce empty lists rather
        than errors.
        """
        errors: List[str] = []
        for name in (
            "big_ticket_threshold",
            "fraud_alert_threshold",
            "fraud_high_value_threshold",
            "unknown_vendor_threshold",
            "salary_auto_detect_threshold",
        ):
            value = getattr(self, name)
            if value <= 0:
                errors.append(f"{name} must be > 0 (got {value})")

        if self.fraud_high_value_threshold < self.fraud_alert_threshold:
            errors.append(
                "fraud_high_value_threshold must be >= fraud_alert_threshold "
                f"({self.fraud_high_value_threshold} < {self.fraud_alert_threshold})"
            )

        if self.min_rows_for_anomalies < 1:
            errors.append(f"min_rows_for_anomalies must be >= 1 (got {self.min_rows_for_anomalies})")

        if any(not str(name).strip() for name in self.employer_names):
            errors.append("employer_names must not contain blank entries")

        return len(errors) == 0, errors


DEFAULT_CONFIG = AnalyzerConfig()
