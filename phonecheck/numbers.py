"""
phonecheck/numbers.py
Number normalizer / validator. Leaf module — no other phonecheck imports
except the error type.

Canonical form: the raw input with whitespace, dashes and parentheses
removed, matching the French national format:
  +33 or 0, then a non-zero digit, then 8 digits.
"""

import re

from phonecheck.errors import InvalidNumberFormat

FRENCH_NUMBER_RE = re.compile(r'^(\+33|0)[1-9]\d{8}$', re.ASCII)
_STRIP_RE        = re.compile(r'[\s\-()]')


def normalize(raw: str) -> str:
    """Strip whitespace, dashes and parentheses. No validation."""
    return _STRIP_RE.sub('', raw or '')


def validate(number: str) -> bool:
    return bool(FRENCH_NUMBER_RE.fullmatch(number or ''))


def canonicalize(raw: str) -> str:
    """Normalize and validate. Raises InvalidNumberFormat before anything else runs."""
    number = normalize(raw)
    if not validate(number):
        raise InvalidNumberFormat(raw)
    return number


def national_significant_number(number: str) -> str:
    """The 9 digits after the +33 / 0 prefix."""
    if number.startswith('+33'):
        return number[3:]
    if number.startswith('0'):
        return number[1:]
    return number


def alternate_form(number: str) -> str:
    """+33612345678 <-> 0612345678. Same line, other spelling."""
    nsn = national_significant_number(number)
    if number.startswith('+33'):
        return '0' + nsn
    return '+33' + nsn
