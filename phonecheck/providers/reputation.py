"""
phonecheck/providers/reputation.py
Caller-reputation heuristic (TrueCaller-style).

There is no public API for this kind of service, so the adapter scores
numbers with deterministic substring rules over the number string. Only a
rule match counts as evidence. Numbers that match no rule get a bounded
low-confidence score drawn from a random.Random seeded with the adapter seed
and the number, so the same number always gets the same answer.

Carrier, city and display name are display-only metadata and never feed
the risk decision.

THRESHOLDS (spam_score / scam_reports):
  risk level: >=80 high, >=50 medium, >=20 low, else none
  category:   scam if spam>=80 or reports>=100
              spam if spam>=50 or reports>=50
              suspicious if spam>=20 or reports>=10
              else safe
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional, Tuple

from phonecheck.models.record import ReputationResult, RiskLevel
from phonecheck.numbers import national_significant_number

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]

SOURCE_NAME = 'reputation-heuristic'

# (substring(s), spam_score, scam_reports, confidence label); first match wins
KNOWN_PATTERNS: Tuple[Tuple[Tuple[str, ...], int, int, str], ...] = (
    (('123456789',),   95, 156, 'high'),
    (('000', '111'),   80,  89, 'medium'),
    (('999',),         70,  45, 'medium'),
)

UNMATCHED_MAX_SPAM_SCORE   = 30     # exclusive
UNMATCHED_MAX_SCAM_REPORTS = 10     # exclusive

CONFIDENCE_SCORES = {'high': 90, 'medium': 70, 'low': 40}

CARRIERS = ('Orange', 'SFR', 'Bouygues Telecom', 'Free Mobile')
CITIES   = ('Paris', 'Lyon', 'Marseille', 'Toulouse', 'Nice', 'Nantes')
NAMES    = (
    'Jean Dupont', 'Marie Martin', 'Pierre Durand', 'Sophie Moreau',
    'Michel Leroy', 'Isabelle Roux', 'François David', 'Nathalie Bertrand',
    'Philippe Simon', 'Catherine Laurent', 'Patrick Lefebvre', 'Monique Michel',
)


class ReputationHeuristicAdapter:
    """
    Usage:
        adapter = ReputationHeuristicAdapter(seed=42, latency=(0, 0))
        result  = await adapter.query("+33612345678")
    """

    name = SOURCE_NAME

    def __init__(
        self,
        rng:     Optional[random.Random]   = None,
        seed:    Optional[int]             = None,
        sleep:   Optional[SleepFn]         = None,
        latency: Tuple[float, float]       = (0.5, 1.5),
    ):
        self._rng    = rng or random.Random()
        self.seed    = seed if seed is not None else self._rng.getrandbits(32)
        self._sleep  = sleep or asyncio.sleep
        self.latency = latency

    async def query(self, number: str) -> ReputationResult:
        lo, hi = self.latency
        if hi > 0:
            await self._sleep(lo + self._rng.random() * max(hi - lo, 0.0))
        # latency jitter uses the shared rng; scoring never does
        return analyze_reputation(number, random.Random(f"{self.seed}:{number}"))


def analyze_reputation(number: str, rng: random.Random) -> ReputationResult:
    spam_score, scam_reports, label, matched = _score(number, rng)
    nsn = national_significant_number(number)

    result = ReputationResult(
        number           = number,
        spam_score       = spam_score,
        scam_reports     = scam_reports,
        confidence_label = label,
        confidence       = CONFIDENCE_SCORES[label],
        risk_level       = risk_level_for_spam_score(spam_score),
        category         = category_for(spam_score, scam_reports),
        line_type        = 'mobile' if nsn[:1] in ('6', '7') else 'landline',
        carrier          = rng.choice(CARRIERS),
        city             = rng.choice(CITIES),
        timezone         = 'Europe/Paris',
        display_name     = rng.choice(NAMES),
        matched          = matched,
    )
    logger.debug(
        f"Reputation heuristic: spam_score={result.spam_score} "
        f"reports={result.scam_reports} category={result.category}"
    )
    return result


def _score(number: str, rng: random.Random) -> Tuple[int, int, str, bool]:
    for needles, spam_score, scam_reports, label in KNOWN_PATTERNS:
        if any(n in number for n in needles):
            return spam_score, scam_reports, label, True
    return (
        rng.randrange(UNMATCHED_MAX_SPAM_SCORE),
        rng.randrange(UNMATCHED_MAX_SCAM_REPORTS),
        'low',
        False,
    )


def risk_level_for_spam_score(spam_score: int) -> RiskLevel:
    if spam_score >= 80:
        return RiskLevel.HIGH
    if spam_score >= 50:
        return RiskLevel.MEDIUM
    if spam_score >= 20:
        return RiskLevel.LOW
    return RiskLevel.NONE


def category_for(spam_score: int, scam_reports: int) -> str:
    if spam_score >= 80 or scam_reports >= 100:
        return 'scam'
    if spam_score >= 50 or scam_reports >= 50:
        return 'spam'
    if spam_score >= 20 or scam_reports >= 10:
        return 'suspicious'
    return 'safe'
