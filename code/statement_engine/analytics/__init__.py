from .anomaly import AnomalyDetection, CategoryProfile, SpendingProfile, detect_anomalies
from .frame import to_frame
from .salary import CashFlowScore, SalaryUtilization
from .summary import AccountSummary

__all__ = [
    "AccountSummary",
    "AnomalyDetection",
    "CashFlowScore",
    "CategoryProfile",
    "SalaryUtilization",
    "SpendingProfile",
    "detect_anomalies",
    "to_frame",
]
