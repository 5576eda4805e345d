"""
phonecheck/analysis/patterns.py
Digit-pattern analyzer for numbers that no source knows about.

Only explains a miss ("why no hit") — it never changes the verdict.

Rules on the national significant number (first match wins):
  starts with 1      → medium  (often telemarketing)
  starts with 8      → low     (premium-rate services)
  starts with 9      → low     (special services)
  one digit ≥6 times → medium
  otherwise          → no pattern risk, confidence 85
"""

from collections import Counter

from phonecheck.models.record import PatternAnalysis, RiskLevel
from phonecheck.numbers import national_significant_number

PREFIX_RULES = (
    ('1', RiskLevel.MEDIUM, 'Number starts with 1 (often telemarketing)'),
    ('8', RiskLevel.LOW,    'Number starts with 8 (premium-rate services)'),
    ('9', RiskLevel.LOW,    'Number starts with 9 (special services)'),
)
PREFIX_CONFIDENCE = 60

REPEAT_THRESHOLD  = 6
REPEAT_CONFIDENCE = 70

CLEAN_CONFIDENCE  = 85


def analyze_patterns(number: str) -> PatternAnalysis:
    nsn = national_significant_number(number)

    for prefix, level, description in PREFIX_RULES:
        if nsn.startswith(prefix):
            return PatternAnalysis(
                risky       = True,
                risk_level  = level,
                description = description,
                confidence  = PREFIX_CONFIDENCE,
            )

    if nsn and max(Counter(nsn).values()) >= REPEAT_THRESHOLD:
        return PatternAnalysis(
            risky       = True,
            risk_level  = RiskLevel.MEDIUM,
            description = 'Suspicious number of repeated digits',
            confidence  = REPEAT_CONFIDENCE,
        )

    return PatternAnalysis(
        risky       = False,
        risk_level  = RiskLevel.NONE,
        description = 'No suspicious pattern',
        confidence  = CLEAN_CONFIDENCE,
    )
