"""
tests/test_patterns.py
Digit-pattern analyzer.
"""

import pytest

from phonecheck.analysis.patterns import analyze_patterns
from phonecheck.models.record import RiskLevel


@pytest.mark.parametrize('number,level,confidence', [
    ('+33123456780', RiskLevel.MEDIUM, 60),
    ('0123456780',   RiskLevel.MEDIUM, 60),
    ('0812345678',   RiskLevel.LOW,    60),
    ('+33912345678', RiskLevel.LOW,    60),
])
def test_prefix_rules(number, level, confidence):
    p = analyze_patterns(number)
    assert p.risky
    assert p.risk_level == level
    assert p.confidence == confidence


def test_repeated_digits():
    p = analyze_patterns('0622222229')
    assert p.risky
    assert p.risk_level == RiskLevel.MEDIUM
    assert p.confidence == 70


def test_five_repeats_is_not_enough():
    assert not analyze_patterns('0622222345').risky


def test_clean_number():
    p = analyze_patterns('0612345670')
    assert not p.risky
    assert p.risk_level == RiskLevel.NONE
    assert p.confidence == 85


def test_prefix_checked_on_national_number_only():
    # +33 prefix digits are not part of the national number
    assert analyze_patterns('+33612345670').risk_level == RiskLevel.NONE
