"""
phonecheck/models/record.py
Shared dataclass schema. Registry, providers, aggregator, sink and API
all use these types. Do not add decision logic here — data only.

Every record is frozen: a check builds fresh records, reads them,
and discards them. Nothing is mutated after construction.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple


class RiskLevel(str, Enum):
    """Ordered risk level. Compare with .rank, not with the string value."""
    NONE   = 'none'
    LOW    = 'low'
    MEDIUM = 'medium'
    HIGH   = 'high'

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]

    @classmethod
    def parse(cls, value: Any) -> 'RiskLevel':
        """Lenient parse — unknown / empty values become NONE."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or '').strip().lower())
        except ValueError:
            return cls.NONE


_RISK_RANK = {
    RiskLevel.NONE:   0,
    RiskLevel.LOW:    1,
    RiskLevel.MEDIUM: 2,
    RiskLevel.HIGH:   3,
}


class VerdictType(str, Enum):
    SCAM       = 'scam'
    SPAM       = 'spam'
    SUSPICIOUS = 'suspicious'
    SAFE       = 'safe'        # explicit positive registry entry
    RELIABLE   = 'reliable'    # no negative evidence anywhere
    UNKNOWN    = 'unknown'

    @classmethod
    def parse(cls, value: Any) -> 'VerdictType':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or '').strip().lower())
        except ValueError:
            return cls.UNKNOWN


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── PER-SOURCE FINDINGS ──────────────────────────────────────

@dataclass(frozen=True)
class SourceRecord:
    """One source's finding for one number."""
    found:            bool
    verdict_type:     VerdictType
    risk_level:       RiskLevel
    report_count:     int
    last_report_date: Optional[date]
    description:      str
    category:         str
    source_name:      str
    confidence:       Optional[int]        = None
    metadata:         Mapping[str, Any]    = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderResult:
    """Raw answer from one external reputation provider."""
    provider:         str
    reported:         bool
    report_count:     int                  = 0
    risk_level:       RiskLevel            = RiskLevel.NONE
    verdict_type:     VerdictType          = VerdictType.UNKNOWN
    description:      str                  = ''
    category:         str                  = ''
    last_report_date: Optional[date]       = None
    metadata:         Mapping[str, Any]    = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderOutcome:
    """Settled outcome of one provider call: a result or an error, never both."""
    provider: str
    result:   Optional[ProviderResult]     = None
    error:    Optional[str]                = None

    @property
    def ok(self) -> bool:
        return self.result is not None and self.error is None


@dataclass(frozen=True)
class ExternalSummary:
    """Combined answer of every configured external provider."""
    risk_score:    int
    risk_level:    RiskLevel
    verdict_type:  VerdictType
    description:   str
    total_reports: int
    confidence:    int
    sources:       Tuple[str, ...]              = ()
    outcomes:      Tuple[ProviderOutcome, ...]  = ()
    last_report_date: Optional[date]            = None


@dataclass(frozen=True)
class ReputationResult:
    """Caller-reputation heuristic output. Carrier/city/name are display only."""
    number:           str
    spam_score:       int
    scam_reports:     int
    confidence_label: str              # low / medium / high
    confidence:       int
    risk_level:       RiskLevel
    category:         str              # scam / spam / suspicious / safe
    line_type:        str              # mobile / landline
    carrier:          str
    city:             str
    timezone:         str
    display_name:     str
    matched:          bool             = False   # a known pattern fired
    source_name:      str              = 'reputation-heuristic'

    @property
    def has_evidence(self) -> bool:
        """Only a known-pattern match is a record; an unmatched score is noise."""
        return self.matched


@dataclass(frozen=True)
class PatternAnalysis:
    risky:       bool
    risk_level:  RiskLevel
    description: str
    confidence:  int


# ── VERDICT ──────────────────────────────────────────────────

@dataclass(frozen=True)
class AggregatedVerdict:
    """The single merged answer for one checked number."""
    number:               str
    verdict_type:         VerdictType
    risk_level:           RiskLevel
    confidence:           int
    report_count:         int
    last_report_date:     Optional[date]
    description:          str
    category:             str
    category_label:       str
    source:               str
    found:                bool
    contributing_sources: FrozenSet[str]              = frozenset()
    justification:        Tuple[str, ...]             = ()
    pattern:              Optional[PatternAnalysis]   = None
    external:             Optional[ExternalSummary]   = None
    reputation:           Optional[ReputationResult]  = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serialisable view (enums → values, dates → ISO strings)."""
        return _jsonable(asdict(self))


# ── REPORTING ────────────────────────────────────────────────

@dataclass(frozen=True)
class ReportPayload:
    """A user-submitted report, dispatched identically to every destination."""
    verdict_type: str                  # spam / scam / harassment / other
    description:  str
    category:     str                  = 'unknown'
    experience:   str                  = ''
    submitted_at: datetime             = field(default_factory=utc_now)


@dataclass(frozen=True)
class DispatchOutcome:
    destination: str
    success:     bool
    reference:   Optional[str]         = None
    error:       Optional[str]         = None


@dataclass(frozen=True)
class ReportReceipt:
    number:    str
    success:   bool
    report_id: str
    outcomes:  Tuple[DispatchOutcome, ...] = ()

    def by_destination(self) -> Dict[str, bool]:
        return {o.destination: o.success for o in self.outcomes}

    @property
    def failed_destinations(self) -> Tuple[str, ...]:
        return tuple(o.destination for o in self.outcomes if not o.success)

    def raise_for_partial_failure(self) -> None:
        """Strict callers only — the sink itself never raises on partial failure."""
        from phonecheck.errors import ReportDispatchPartialFailure
        if self.failed_destinations:
            raise ReportDispatchPartialFailure(self.failed_destinations)

    def to_dict(self) -> Dict[str, Any]:
        d = _jsonable(asdict(self))
        d['destinations'] = self.by_destination()
        return d


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Mapping):
        return {k: _jsonable(v) for k, v in obj.items()}
    if isinstance(obj, frozenset):
        return sorted(_jsonable(v) for v in obj)
    if isinstance(obj, (list, tuple)):
        return [_jsonable(v) for v in obj]
    return obj
