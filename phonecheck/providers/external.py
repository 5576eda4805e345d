"""
phonecheck/providers/external.py
External aggregate adapter.

Fans one canonical number out to every configured provider concurrently,
waits for all of them to settle, and combines whatever answered into one
ExternalSummary. A provider that raises or times out is recorded as a
failed ProviderOutcome ("no data") — it never aborts its siblings and
never fails the aggregation.

NOTE ON RISK SCORE:
  risk_score = Σ over reporting providers (report_count * 10 + level bonus)
  level bonus: high 100 / medium 50 / low 25 / none 0
  Report volume dominates risk.

NOTE ON CONFIDENCE:
  confidence = min(100, 20 * responding providers + report volume bonus)
  volume bonus: >100 reports 40 / >50 30 / >10 20 / >0 10 / else 0
  Source diversity dominates confidence. A provider is "responding" when
  it answered at all, with or without reports.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from phonecheck.models.record import (
    ExternalSummary,
    ProviderOutcome,
    ProviderResult,
    RiskLevel,
    VerdictType,
)
from phonecheck.providers.base import ReputationProvider

logger = logging.getLogger(__name__)

# ── SCORING CONSTANTS ────────────────────────────────────────
REPORT_WEIGHT = 10

RISK_LEVEL_BONUS = {
    RiskLevel.HIGH:   100,
    RiskLevel.MEDIUM: 50,
    RiskLevel.LOW:    25,
    RiskLevel.NONE:   0,
}

# Checked top-down, first match wins
RISK_SCORE_THRESHOLDS = (
    (100, RiskLevel.HIGH),
    (50,  RiskLevel.MEDIUM),
    (25,  RiskLevel.LOW),
)

CONFIDENCE_PER_SOURCE = 20

# (more than N reports, bonus), checked top-down
REPORT_VOLUME_BONUS = (
    (100, 40),
    (50,  30),
    (10,  20),
    (0,   10),
)


class ExternalAggregateAdapter:
    """
    Usage:
        adapter = ExternalAggregateAdapter([CommunityScamProvider(), NumVerifyProvider(key)])
        summary = await adapter.query_all("+33612345678")
    """

    def __init__(self, providers: Sequence[ReputationProvider]):
        self.providers = tuple(providers)

    async def query_all(self, number: str) -> ExternalSummary:
        outcomes = await self.settle(number)
        summary  = summarize(outcomes)
        logger.debug(
            f"External aggregate: responding={len(summary.sources)}/{len(outcomes)} "
            f"reports={summary.total_reports} score={summary.risk_score} "
            f"level={summary.risk_level.value} confidence={summary.confidence}"
        )
        return summary

    async def settle(self, number: str) -> List[ProviderOutcome]:
        """Query every provider concurrently. One ProviderOutcome per provider, in registration order."""
        if not self.providers:
            return []

        results = await asyncio.gather(
            *(p.query(number) for p in self.providers),
            return_exceptions=True,
        )

        outcomes: List[ProviderOutcome] = []
        for provider, result in zip(self.providers, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    # CancelledError / KeyboardInterrupt are not provider failures
                    raise result
                logger.warning(f"Provider {provider.name} failed: {result}")
                outcomes.append(ProviderOutcome(provider=provider.name, error=str(result) or type(result).__name__))
            elif not isinstance(result, ProviderResult):
                logger.warning(f"Provider {provider.name} returned {type(result).__name__}, ignoring")
                outcomes.append(ProviderOutcome(provider=provider.name, error='unexpected result type'))
            else:
                outcomes.append(ProviderOutcome(provider=provider.name, result=result))
        return outcomes


# ── SCORING ──────────────────────────────────────────────────

def summarize(outcomes: Sequence[ProviderOutcome]) -> ExternalSummary:
    """Pure combination of settled provider outcomes."""
    responding = [o for o in outcomes if o.ok]
    reporting  = [o.result for o in responding if o.result.reported]

    # negative counts from a provider are treated as zero everywhere
    counted = [(r, max(int(r.report_count), 0)) for r in reporting]

    risk_score    = 0
    total_reports = 0
    for r, count in counted:
        risk_score    += count * REPORT_WEIGHT + RISK_LEVEL_BONUS.get(r.risk_level, 0)
        total_reports += count

    lead: Optional[ProviderResult] = None
    lead_count = -1
    for r, count in counted:
        # strict > keeps the earliest registered provider on ties
        if count > lead_count:
            lead, lead_count = r, count

    dates = [r.last_report_date for r in reporting if r.last_report_date is not None]

    return ExternalSummary(
        risk_score       = risk_score,
        risk_level       = risk_level_for_score(risk_score),
        verdict_type     = lead.verdict_type if lead else VerdictType.UNKNOWN,
        description      = lead.description if lead else '',
        total_reports    = total_reports,
        confidence       = calculate_confidence(len(responding), total_reports),
        sources          = tuple(o.provider for o in responding),
        outcomes         = tuple(outcomes),
        last_report_date = max(dates) if dates else None,
    )


def risk_level_for_score(score: float) -> RiskLevel:
    for threshold, level in RISK_SCORE_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.NONE


def calculate_confidence(responding: int, total_reports: int) -> int:
    confidence = max(responding, 0) * CONFIDENCE_PER_SOURCE
    for more_than, bonus in REPORT_VOLUME_BONUS:
        if total_reports > more_than:
            confidence += bonus
            break
    return min(confidence, 100)
