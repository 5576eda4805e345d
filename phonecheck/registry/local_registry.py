"""
phonecheck/registry/local_registry.py
Curated local registry — read-only mapping from canonical number to a
community-reviewed risk record.

The registry is loaded once and wrapped in a MappingProxyType. Lookups are
pure reads and never touch the network. A number may be stored as either
+33XXXXXXXXX or 0XXXXXXXXX; lookup tries the exact key first, then the
other spelling of the same line.

Dataset format (JSON object):
  { "+33612345678": { "type": "scam", "reports": 342, "lastReport": "2024-01-21",
                      "description": "...", "category": "tech_support",
                      "riskLevel": "high" }, ... }
"""

from __future__ import annotations

import json
import logging
from datetime import date
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from phonecheck.models.record import RiskLevel, SourceRecord, VerdictType
from phonecheck.numbers import alternate_form

logger = logging.getLogger(__name__)

SOURCE_NAME = 'local-registry'

CATEGORY_LABELS: Dict[str, str] = {
    'tech_support':     'Fraudulent technical support',
    'banking':          'Banking scam',
    'utility':          'Fake bills',
    'tax':              'Tax scam',
    'insurance':        'Insurance scam',
    'inheritance':      'Inheritance scam',
    'telecom':          'Telecom telemarketing',
    'finance':          'Financial telemarketing',
    'energy':           'Energy telemarketing',
    'home_improvement': 'Home improvement',
    'lottery':          'Contests / lotteries',
    'survey':           'Paid surveys',
    'spam':             'Spam',
    'verified':         'Verified number',
    'external':         'Reported by external sources',
    'reputation':       'Reported by caller reputation service',
    'pattern_analysis': 'Pattern analysis',
    'unknown':          'Uncategorised',
}


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category or '', CATEGORY_LABELS['unknown'])


class LocalRegistry:
    """
    Immutable number → record lookup.

    Usage:
        registry = LocalRegistry.from_json()          # packaged dataset
        record   = registry.lookup("+33612345678")    # SourceRecord or None
    """

    def __init__(self, entries: Mapping[str, Mapping[str, Any]]):
        self._entries = MappingProxyType({
            str(k): MappingProxyType(dict(v)) for k, v in entries.items()
        })

    @classmethod
    def from_json(cls, path: Optional[Path] = None) -> 'LocalRegistry':
        """Load from a JSON file, or the packaged sample dataset when path is None."""
        if path is not None:
            text = Path(path).read_text(encoding='utf-8')
            origin = str(path)
        else:
            text = (
                resources.files('phonecheck.data')
                .joinpath('registry.json')
                .read_text(encoding='utf-8')
            )
            origin = 'phonecheck.data/registry.json'

        raw = json.loads(text)
        if not isinstance(raw, dict):
            raise ValueError(f"Registry dataset must be a JSON object: {origin}")
        entries = {k: v for k, v in raw.items() if isinstance(v, dict)}
        skipped = len(raw) - len(entries)
        if skipped:
            logger.warning(f"Registry {origin}: skipped {skipped} malformed entries")
        logger.info(f"Registry loaded: {len(entries)} numbers from {origin}")
        return cls(entries)

    # ── LOOKUP ───────────────────────────────────────────────

    def lookup(self, number: str) -> Optional[SourceRecord]:
        key = self._resolve_key(number)
        if key is None:
            return None
        return _to_record(self._entries[key])

    def _resolve_key(self, number: str) -> Optional[str]:
        if number in self._entries:
            return number
        alt = alternate_form(number)
        if alt in self._entries:
            return alt
        return None

    # ── SEARCH ───────────────────────────────────────────────

    def search(
        self,
        query:        str                   = '',
        verdict_type: Optional[str]         = None,
        category:     Optional[str]         = None,
        risk_level:   Optional[str]         = None,
    ) -> List[Tuple[str, SourceRecord]]:
        """
        Filter by type / category / risk level, then case-insensitive
        substring match on "<number> <description> <category label>".
        Registry order is preserved; callers sort.
        """
        needle = (query or '').strip().lower()
        hits: List[Tuple[str, SourceRecord]] = []

        for number, entry in self._entries.items():
            if verdict_type and entry.get('type') != verdict_type:
                continue
            if category and entry.get('category') != category:
                continue
            if risk_level and entry.get('riskLevel') != risk_level:
                continue
            if needle:
                haystack = (
                    f"{number} {entry.get('description', '')} "
                    f"{category_label(entry.get('category', ''))}"
                ).lower()
                if needle not in haystack:
                    continue
            hits.append((number, _to_record(entry)))

        return hits

    # ── MAPPING HELPERS ──────────────────────────────────────

    def items(self) -> Iterator[Tuple[str, SourceRecord]]:
        for number, entry in self._entries.items():
            yield number, _to_record(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, number: object) -> bool:
        return isinstance(number, str) and self._resolve_key(number) is not None


def _to_record(entry: Mapping[str, Any]) -> SourceRecord:
    return SourceRecord(
        found            = True,
        verdict_type     = VerdictType.parse(entry.get('type')),
        risk_level       = RiskLevel.parse(entry.get('riskLevel')),
        report_count     = max(int(entry.get('reports') or 0), 0),
        last_report_date = _parse_date(entry.get('lastReport')),
        description      = str(entry.get('description') or ''),
        category         = str(entry.get('category') or 'unknown'),
        source_name      = SOURCE_NAME,
    )


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None
    return None
