"""
phonecheck/reporting — user report fan-out and the local report store.
"""

from phonecheck.reporting.sink import (
    ProviderReportDestination,
    ReportDestination,
    ReportFanOutSink,
)
from phonecheck.reporting.sqlite_store import LocalReportStore

__all__ = [
    "LocalReportStore",
    "ProviderReportDestination",
    "ReportDestination",
    "ReportFanOutSink",
]
