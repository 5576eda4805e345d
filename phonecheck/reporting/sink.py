"""
phonecheck/reporting/sink.py
Report fan-out sink.

One user report is dispatched, unchanged, to every configured destination
concurrently. Each destination accepts or refuses on its own; there is no
transaction and nothing is rolled back when a sibling fails.

SUCCESS POLICY:
  any   — at least one destination accepted (default)
  all   — every destination accepted
  local — the local store accepted, whatever the others did
A sink with no destinations never succeeds.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import List, Sequence

from phonecheck.errors import ReportDispatchPartialFailure
from phonecheck.models.record import DispatchOutcome, ReportPayload, ReportReceipt
from phonecheck.providers.base import ReputationProvider

logger = logging.getLogger(__name__)

POLICY_ANY   = 'any'
POLICY_ALL   = 'all'
POLICY_LOCAL = 'local'
POLICIES     = (POLICY_ANY, POLICY_ALL, POLICY_LOCAL)

LOCAL_DESTINATION = 'local'


class ReportDestination(ABC):
    """Anything that can take a report and hand back a reference id."""

    destination_id: str = 'destination'

    @abstractmethod
    async def submit(self, number: str, report: ReportPayload) -> str:
        """Return the destination's reference. Raise on refusal or failure."""
        ...


class ProviderReportDestination(ReportDestination):
    """Forwards reports to an external provider's submit_report()."""

    def __init__(self, provider: ReputationProvider):
        self.provider       = provider
        self.destination_id = provider.name

    async def submit(self, number: str, report: ReportPayload) -> str:
        return await self.provider.submit_report(number, report)


class ReportFanOutSink:
    """
    Usage:
        sink    = ReportFanOutSink([LocalReportStore(db), ProviderReportDestination(p)])
        receipt = await sink.submit("+33612345678", payload)
        receipt.by_destination()   # {"local": True, "scamalert": False}
    """

    def __init__(self, destinations: Sequence[ReportDestination], policy: str = POLICY_ANY):
        if policy not in POLICIES:
            raise ValueError(f"Unknown report success policy {policy!r}; expected one of {POLICIES}")
        self.destinations = tuple(destinations)
        self.policy       = policy

    async def submit(self, number: str, report: ReportPayload) -> ReportReceipt:
        outcomes  = await self._dispatch(number, report)
        success   = self._overall_success(outcomes)
        report_id = f"MULTI-{int(time.time() * 1000)}"

        failed = [o.destination for o in outcomes if not o.success]
        if failed:
            logger.warning(f"Report {report_id}: {ReportDispatchPartialFailure(failed)}")
        logger.info(
            f"Report {report_id} dispatched: "
            f"{len(outcomes) - len(failed)}/{len(outcomes)} accepted, success={success}"
        )
        return ReportReceipt(
            number    = number,
            success   = success,
            report_id = report_id,
            outcomes  = tuple(outcomes),
        )

    async def _dispatch(self, number: str, report: ReportPayload) -> List[DispatchOutcome]:
        if not self.destinations:
            return []

        results = await asyncio.gather(
            *(d.submit(number, report) for d in self.destinations),
            return_exceptions=True,
        )

        outcomes: List[DispatchOutcome] = []
        for dest, result in zip(self.destinations, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                outcomes.append(DispatchOutcome(
                    destination = dest.destination_id,
                    success     = False,
                    error       = str(result) or type(result).__name__,
                ))
            else:
                outcomes.append(DispatchOutcome(
                    destination = dest.destination_id,
                    success     = True,
                    reference   = str(result),
                ))
        return outcomes

    def _overall_success(self, outcomes: Sequence[DispatchOutcome]) -> bool:
        if not outcomes:
            return False
        if self.policy == POLICY_ALL:
            return all(o.success for o in outcomes)
        if self.policy == POLICY_LOCAL:
            return any(o.success for o in outcomes if o.destination == LOCAL_DESTINATION)
        return any(o.success for o in outcomes)
