"""
phonecheck/models — frozen record types shared by every layer.
"""

from phonecheck.models.record import (
    AggregatedVerdict,
    ExternalSummary,
    ReportPayload,
    ReportReceipt,
    ReputationResult,
    RiskLevel,
    SourceRecord,
    VerdictType,
)

__all__ = [
    "AggregatedVerdict",
    "ExternalSummary",
    "ReportPayload",
    "ReportReceipt",
    "ReputationResult",
    "RiskLevel",
    "SourceRecord",
    "VerdictType",
]
