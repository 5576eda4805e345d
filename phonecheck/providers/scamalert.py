"""
phonecheck/providers/scamalert.py
Community scam database provider (ScamAlert.fr style).

There is no public API for this source, so the provider answers from an
embedded dataset of community reports. Network latency is simulated with
an injected async sleep — tests pass a no-op sleep or latency=0.

Replace with an HTTP-backed ReputationProvider in production; the
aggregate adapter does not know the difference.
"""

import asyncio
import logging
import time
from datetime import date
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from phonecheck.models.record import (
    ProviderResult,
    ReportPayload,
    RiskLevel,
    VerdictType,
)
from phonecheck.providers.base import ReputationProvider

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]

DEFAULT_LATENCY_SEC = 0.8

COMMUNITY_REPORTS: Dict[str, Dict[str, Any]] = {
    '+33123456789': {
        'reports':     156,
        'lastReport':  '2024-01-20',
        'type':        'spam',
        'description': 'Automated telemarketing calls - SFR/Orange',
        'category':    'telecom',
        'riskLevel':   'medium',
    },
    '+33612345678': {
        'reports':     342,
        'lastReport':  '2024-01-21',
        'type':        'scam',
        'description': 'Fake Microsoft technical support - asks for remote access',
        'category':    'tech_support',
        'riskLevel':   'high',
    },
    '+33612345677': {
        'reports':     267,
        'lastReport':  '2024-01-22',
        'type':        'scam',
        'description': 'Fake EDF electricity bill - urgent payment request',
        'category':    'utility',
        'riskLevel':   'high',
    },
}


class CommunityScamProvider(ReputationProvider):

    name        = 'scamalert'
    free        = True
    daily_limit = 'unlimited'

    def __init__(
        self,
        dataset:         Optional[Mapping[str, Mapping[str, Any]]] = None,
        latency_sec:     float             = DEFAULT_LATENCY_SEC,
        sleep:           Optional[SleepFn] = None,
        accepts_reports: bool              = False,
    ):
        self._dataset         = dict(dataset if dataset is not None else COMMUNITY_REPORTS)
        self.latency_sec      = latency_sec
        self._sleep           = sleep or asyncio.sleep
        self._accepts_reports = accepts_reports
        self._submitted: List[Tuple[str, ReportPayload]] = []

    @property
    def accepts_reports(self) -> bool:
        return self._accepts_reports

    @property
    def submitted(self) -> Tuple[Tuple[str, ReportPayload], ...]:
        return tuple(self._submitted)

    async def query(self, number: str) -> ProviderResult:
        if self.latency_sec > 0:
            await self._sleep(self.latency_sec)

        entry = self._dataset.get(number)
        if not entry:
            return ProviderResult(provider=self.name, reported=False)

        return ProviderResult(
            provider         = self.name,
            reported         = True,
            report_count     = int(entry.get('reports') or 0),
            risk_level       = RiskLevel.parse(entry.get('riskLevel')),
            verdict_type     = VerdictType.parse(entry.get('type')),
            description      = str(entry.get('description') or ''),
            category         = str(entry.get('category') or ''),
            last_report_date = _parse_date(entry.get('lastReport')),
        )

    async def submit_report(self, number: str, report: ReportPayload) -> str:
        if not self._accepts_reports:
            raise NotImplementedError(f"{self.name} report submission is disabled")
        if self.latency_sec > 0:
            await self._sleep(self.latency_sec)
        self._submitted.append((number, report))
        reference = f"SA-{int(time.time() * 1000)}"
        logger.info(f"Report forwarded to {self.name}: ref={reference}")
        return reference


def _parse_date(value: Any) -> Optional[date]:
    try:
        return date.fromisoformat(value) if value else None
    except (TypeError, ValueError):
        return None
