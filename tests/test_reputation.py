"""
tests/test_reputation.py
Caller-reputation heuristic — fixed patterns, seeded randomness, thresholds.
"""

import asyncio
import random

import pytest

from phonecheck.models.record import RiskLevel
from phonecheck.providers.reputation import (
    ReputationHeuristicAdapter,
    analyze_reputation,
    category_for,
    risk_level_for_spam_score,
)


class TestKnownPatterns:

    def test_sequential_digits(self, rng):
        r = analyze_reputation('+33123456789', rng)
        assert (r.spam_score, r.scam_reports, r.confidence_label) == (95, 156, 'high')
        assert r.confidence == 90
        assert r.risk_level == RiskLevel.HIGH
        assert r.category == 'scam'
        assert r.line_type == 'landline'

    def test_triple_zero(self, rng):
        r = analyze_reputation('+33600011122', rng)
        assert (r.spam_score, r.scam_reports, r.confidence_label) == (80, 89, 'medium')
        assert r.category == 'scam'
        assert r.line_type == 'mobile'

    def test_triple_nine(self, rng):
        r = analyze_reputation('+33699912345', rng)
        assert (r.spam_score, r.scam_reports) == (70, 45)
        assert r.risk_level == RiskLevel.MEDIUM
        assert r.category == 'spam'
        assert r.confidence == 70


class TestUnmatched:

    def test_bounded_low_confidence(self):
        for seed in range(50):
            r = analyze_reputation('+33698765432', random.Random(seed))
            assert 0 <= r.spam_score < 30
            assert 0 <= r.scam_reports < 10
            assert r.confidence_label == 'low'
            assert r.confidence == 40
            assert r.category in ('safe', 'suspicious')

    def test_same_seed_same_answer(self):
        a = analyze_reputation('+33698765432', random.Random(99))
        b = analyze_reputation('+33698765432', random.Random(99))
        assert a == b

    def test_unmatched_is_not_evidence(self):
        for seed in range(20):
            r = analyze_reputation('+33698765432', random.Random(seed))
            assert not r.matched
            assert not r.has_evidence


class TestThresholds:

    @pytest.mark.parametrize('score,level', [
        (0, RiskLevel.NONE), (19, RiskLevel.NONE), (20, RiskLevel.LOW),
        (50, RiskLevel.MEDIUM), (79, RiskLevel.MEDIUM), (80, RiskLevel.HIGH),
    ])
    def test_risk_level(self, score, level):
        assert risk_level_for_spam_score(score) == level

    def test_category_by_reports_alone(self):
        assert category_for(0, 100) == 'scam'
        assert category_for(0, 50) == 'spam'
        assert category_for(0, 10) == 'suspicious'
        assert category_for(0, 9) == 'safe'


class TestAdapter:

    def test_no_latency_does_not_sleep(self):
        slept = []

        async def fake_sleep(sec):
            slept.append(sec)

        adapter = ReputationHeuristicAdapter(rng=random.Random(1), sleep=fake_sleep, latency=(0, 0))
        asyncio.run(adapter.query('+33123456789'))
        assert slept == []

    def test_latency_within_bounds(self):
        slept = []

        async def fake_sleep(sec):
            slept.append(sec)

        adapter = ReputationHeuristicAdapter(rng=random.Random(1), sleep=fake_sleep, latency=(0.5, 1.5))
        result = asyncio.run(adapter.query('+33123456789'))
        assert len(slept) == 1
        assert 0.5 <= slept[0] <= 1.5
        assert result.spam_score == 95

    def test_has_evidence(self, rng):
        assert analyze_reputation('+33123456789', rng).has_evidence

    def test_adapter_answer_depends_only_on_seed_and_number(self):
        adapter = ReputationHeuristicAdapter(seed=7, latency=(0, 0))
        first = asyncio.run(adapter.query('+33645230203'))
        asyncio.run(adapter.query('+33698765432'))
        again = asyncio.run(adapter.query('+33645230203'))
        other = asyncio.run(ReputationHeuristicAdapter(seed=7, latency=(0, 0)).query('+33645230203'))
        assert first == again == other

    def test_unseeded_adapter_is_stable(self):
        adapter = ReputationHeuristicAdapter(latency=(0, 0))
        answers = {asyncio.run(adapter.query('+33645230203')) for _ in range(5)}
        assert len(answers) == 1
