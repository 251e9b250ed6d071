from labtrack.models.bloodwork import BloodworkHistoryAnalysis, BloodworkReport, TokenUsageLog
from labtrack.models.user import User, UserSession

__all__ = [
    "User",
    "UserSession",
    "BloodworkReport",
    "BloodworkHistoryAnalysis",
    "TokenUsageLog",
]
