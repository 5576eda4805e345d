"""
tests/conftest.py
Shared fixtures and stub sources. No network, no sleeps.
"""

import random
from typing import Optional

import pytest

from phonecheck.models.record import (
    ProviderResult,
    ReportPayload,
    ReputationResult,
    RiskLevel,
    VerdictType,
)
from phonecheck.providers.base import ReputationProvider
from phonecheck.registry.local_registry import LocalRegistry


class StubProvider(ReputationProvider):
    """Answers with a fixed ProviderResult, or raises a fixed error."""

    def __init__(self, name: str, result: Optional[ProviderResult] = None, error: Exception = None):
        self.name    = name
        self._result = result
        self._error  = error
        self.calls   = []

    async def query(self, number: str) -> ProviderResult:
        self.calls.append(number)
        if self._error is not None:
            raise self._error
        if self._result is None:
            return ProviderResult(provider=self.name, reported=False)
        return self._result


class StubReputation:
    """Stands in for ReputationHeuristicAdapter."""

    name = 'reputation-heuristic'

    def __init__(self, result: Optional[ReputationResult] = None, error: Exception = None):
        self._result = result
        self._error  = error

    async def query(self, number: str) -> ReputationResult:
        if self._error is not None:
            raise self._error
        return self._result


def reported(
    provider: str,
    count:    int,
    level:    RiskLevel   = RiskLevel.HIGH,
    vtype:    VerdictType = VerdictType.SCAM,
    desc:     str         = '',
) -> ProviderResult:
    return ProviderResult(
        provider     = provider,
        reported     = True,
        report_count = count,
        risk_level   = level,
        verdict_type = vtype,
        description  = desc or f"{provider} says {vtype.value}",
    )


def reputation_result(
    spam_score:   int = 60,
    scam_reports: int = 12,
    category:     str = 'spam',
    confidence:   int = 70,
    risk_level:   RiskLevel = RiskLevel.MEDIUM,
    matched:      bool = True,
) -> ReputationResult:
    return ReputationResult(
        number           = '+33698765432',
        spam_score       = spam_score,
        scam_reports     = scam_reports,
        confidence_label = 'medium',
        confidence       = confidence,
        risk_level       = risk_level,
        category         = category,
        line_type        = 'mobile',
        carrier          = 'Orange',
        city             = 'Paris',
        timezone         = 'Europe/Paris',
        display_name     = 'Jean Dupont',
        matched          = matched,
    )


@pytest.fixture
def registry():
    return LocalRegistry.from_json()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def payload():
    return ReportPayload(verdict_type='scam', description='Fake bank advisor', category='banking')


@pytest.fixture
def offline_config(tmp_path):
    return {
        'db_path':                   str(tmp_path / 'reports.db'),
        'registry_path':             None,
        'numverify_enabled':         False,
        'scamalert_enabled':         True,
        'scamalert_accepts_reports': True,
        'simulate_latency':          False,
        'random_seed':               7,
        'report_success_policy':     'any',
        'fallback_confidence':       95,
    }
