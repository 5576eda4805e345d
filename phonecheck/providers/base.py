"""
phonecheck/providers/base.py
Abstract base class for all external reputation providers.
To add a new backend: subclass ReputationProvider and implement query().
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from phonecheck.models.record import ProviderResult, ReportPayload


class ReputationProvider(ABC):
    """
    All external reputation backends implement this interface.
    The aggregate adapter calls query() and gets back a ProviderResult.
    It never knows whether the backend is simulated or HTTP-backed.
    """

    name:        str  = 'provider'
    free:        bool = True
    daily_limit: Any  = None        # int, or 'unlimited'

    @abstractmethod
    async def query(self, number: str) -> ProviderResult:
        """
        Look up one canonical number.
        Raise on failure (ProviderUnavailable or anything else) — the
        aggregate adapter records the failure as "no data" for this provider.
        A provider that answered but has no reports returns reported=False.
        """
        ...

    @property
    def accepts_reports(self) -> bool:
        return False

    async def submit_report(self, number: str, report: ReportPayload) -> str:
        """
        Forward a user report. Returns the provider's reference id.
        Providers that take reports override this and accepts_reports.
        """
        raise NotImplementedError(f"{self.name} does not accept reports")

    def describe(self) -> Dict[str, Any]:
        return {
            'name':            self.name,
            'free':            self.free,
            'daily_limit':     self.daily_limit,
            'accepts_reports': self.accepts_reports,
        }
