"""
phonecheck/analysis/aggregator.py
Decision aggregator — merges the per-source findings for one number into
the single AggregatedVerdict.

PRIORITY CHAIN (first state with a positive finding wins):
  1. LOCAL      — curated registry entry. Human-reviewed, authoritative for
                  type / risk level / description. Confidence comes from the
                  external summary when at least one provider
                  responded, else 80.
  2. EXTERNAL   — aggregate of external providers with total_reports > 0.
                  Type / risk level / confidence / description verbatim.
  3. REPUTATION — caller-reputation heuristic with any evidence. Category
                  'safe' maps to verdict 'reliable' at confidence 95;
                  otherwise the heuristic's own confidence (85 if absent).
  4. FALLBACK   — no evidence anywhere: reliable / none / 95 / 0 reports.
                  The digit-pattern analysis is attached for display and
                  explanation only; it never changes the verdict.

The chain inspects which sources found something, never when they
answered — provider response order has no effect on the result.

NOTE ON THE FALLBACK:
  Absence of negative evidence is reported as 'reliable' at confidence 95.
  This is a product policy: a brand new scam number looks identical to a
  genuinely safe one until someone reports it. The confidence is a
  parameter (fallback_confidence) so deployments can lower it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Set

from phonecheck.models.record import (
    AggregatedVerdict,
    ExternalSummary,
    PatternAnalysis,
    ReputationResult,
    RiskLevel,
    SourceRecord,
    VerdictType,
)
from phonecheck.registry.local_registry import category_label

logger = logging.getLogger(__name__)

StageHook = Callable[[str, Mapping[str, Any]], None]

# ── DEFAULTS ─────────────────────────────────────────────────
LOCAL_DEFAULT_CONFIDENCE      = 80
REPUTATION_SAFE_CONFIDENCE    = 95
REPUTATION_DEFAULT_CONFIDENCE = 85
FALLBACK_CONFIDENCE           = 95

SOURCE_LOCAL      = 'local-registry'
SOURCE_EXTERNAL   = 'external-aggregate'
SOURCE_REPUTATION = 'reputation-heuristic'
SOURCE_NONE       = 'none'

FALLBACK_DESCRIPTION = 'No record in any source.'

# Decision states, in evaluation order
STATE_LOCAL      = 'local'
STATE_EXTERNAL   = 'external'
STATE_REPUTATION = 'reputation'
STATE_FALLBACK   = 'fallback'


def log_stage(stage: str, fields: Mapping[str, Any]) -> None:
    """Default stage hook — debug log line per verdict-build stage."""
    detail = ' '.join(f"{k}={v}" for k, v in fields.items())
    logger.debug(f"verdict.{stage} {detail}")


def build_verdict(
    number:              str,
    local:               Optional[SourceRecord],
    external:            Optional[ExternalSummary],
    reputation:          Optional[ReputationResult],
    pattern:             Optional[PatternAnalysis] = None,
    hook:                Optional[StageHook]       = None,
    fallback_confidence: int                       = FALLBACK_CONFIDENCE,
) -> AggregatedVerdict:
    """
    Pure function of its inputs. Any source may be None (missing or failed).

    Args:
        number:              canonical number being checked.
        local:               registry record, or None when not found / failed.
        external:            external summary, or None when the adapter failed.
        reputation:          heuristic result, or None when it failed.
        pattern:             digit-pattern analysis — attached to fallback verdicts only.
        hook:                stage hook, called with ("sources", ...) and ("decision", ...).
        fallback_confidence: confidence of the no-evidence verdict.
    """
    hook = hook or log_stage

    local_found      = local is not None and local.found
    external_found   = external is not None and external.total_reports > 0
    reputation_found = reputation is not None and reputation.has_evidence

    contributing = _contributing_sources(local if local_found else None, external, reputation)

    hook('sources', {
        'number':     number,
        'local':      local_found,
        'external':   external.total_reports if external is not None else 'failed',
        'reputation': reputation.category if reputation is not None else 'failed',
    })

    if local_found:
        state   = STATE_LOCAL
        verdict = _from_local(number, local, external, reputation, contributing)
    elif external_found:
        state   = STATE_EXTERNAL
        verdict = _from_external(number, external, reputation, contributing)
    elif reputation_found:
        state   = STATE_REPUTATION
        verdict = _from_reputation(number, reputation, external, contributing)
    else:
        state   = STATE_FALLBACK
        verdict = _fallback(number, external, reputation, pattern, contributing, fallback_confidence)

    hook('decision', {
        'number':     number,
        'state':      state,
        'type':       verdict.verdict_type.value,
        'risk':       verdict.risk_level.value,
        'confidence': verdict.confidence,
    })
    return verdict


# ── TERMINAL STATES ──────────────────────────────────────────

def _from_local(
    number:       str,
    local:        SourceRecord,
    external:     Optional[ExternalSummary],
    reputation:   Optional[ReputationResult],
    contributing: Set[str],
) -> AggregatedVerdict:
    # a summary where every provider failed carries no confidence signal
    has_external = external is not None and bool(external.sources)
    confidence   = external.confidence if has_external else LOCAL_DEFAULT_CONFIDENCE

    why = [
        f"Listed in the local registry as {local.verdict_type.value} "
        f"({local.report_count} reports, {local.risk_level.value} risk).",
    ]
    if has_external:
        why.append(
            f"Confidence from {len(external.sources)} responding external source(s) "
            f"with {external.total_reports} reports."
        )
        if external.total_reports and external.verdict_type != local.verdict_type:
            why.append(
                f"External sources say {external.verdict_type.value}; "
                f"the registry entry takes precedence."
            )
    else:
        why.append(f"External sources unavailable; default confidence {LOCAL_DEFAULT_CONFIDENCE}.")

    return AggregatedVerdict(
        number               = number,
        verdict_type         = local.verdict_type,
        risk_level           = local.risk_level,
        confidence           = _clamp(confidence),
        report_count         = local.report_count,
        last_report_date     = local.last_report_date,
        description          = local.description,
        category             = local.category,
        category_label       = category_label(local.category),
        source               = SOURCE_LOCAL,
        found                = True,
        contributing_sources = frozenset(contributing),
        justification        = tuple(why),
        external             = external,
        reputation           = reputation,
    )


def _from_external(
    number:       str,
    external:     ExternalSummary,
    reputation:   Optional[ReputationResult],
    contributing: Set[str],
) -> AggregatedVerdict:
    why = [
        "Not in the local registry.",
        f"Reported {external.total_reports} times across "
        f"{', '.join(external.sources) or 'external sources'} "
        f"(risk score {external.risk_score} → {external.risk_level.value}).",
    ]
    return AggregatedVerdict(
        number               = number,
        verdict_type         = external.verdict_type,
        risk_level           = external.risk_level,
        confidence           = _clamp(external.confidence),
        report_count         = external.total_reports,
        last_report_date     = external.last_report_date,
        description          = external.description,
        category             = 'external',
        category_label       = category_label('external'),
        source               = SOURCE_EXTERNAL,
        found                = True,
        contributing_sources = frozenset(contributing),
        justification        = tuple(why),
        external             = external,
        reputation           = reputation,
    )


def _from_reputation(
    number:       str,
    reputation:   ReputationResult,
    external:     Optional[ExternalSummary],
    contributing: Set[str],
) -> AggregatedVerdict:
    if reputation.category == 'safe':
        verdict_type = VerdictType.RELIABLE
        confidence   = REPUTATION_SAFE_CONFIDENCE
    else:
        verdict_type = VerdictType.parse(reputation.category)
        confidence   = reputation.confidence or REPUTATION_DEFAULT_CONFIDENCE

    description = (
        f"Caller reputation: spam score {reputation.spam_score}/100, "
        f"{reputation.scam_reports} reports"
    )
    why = [
        "Not in the local registry and no external reports.",
        f"Caller-reputation heuristic rates it {reputation.category} "
        f"(spam score {reputation.spam_score}, {reputation.confidence_label} confidence).",
    ]
    return AggregatedVerdict(
        number               = number,
        verdict_type         = verdict_type,
        risk_level           = reputation.risk_level,
        confidence           = _clamp(confidence),
        report_count         = reputation.scam_reports,
        last_report_date     = None,
        description          = description,
        category             = 'reputation',
        category_label       = category_label('reputation'),
        source               = SOURCE_REPUTATION,
        found                = True,
        contributing_sources = frozenset(contributing),
        justification        = tuple(why),
        external             = external,
        reputation           = reputation,
    )


def _fallback(
    number:       str,
    external:     Optional[ExternalSummary],
    reputation:   Optional[ReputationResult],
    pattern:      Optional[PatternAnalysis],
    contributing: Set[str],
    confidence:   int,
) -> AggregatedVerdict:
    why = ["No record in the local registry, external sources or caller reputation."]
    if pattern is not None:
        if pattern.risky:
            why.append(f"Pattern note: {pattern.description} ({pattern.risk_level.value}).")
        else:
            why.append(f"Pattern note: {pattern.description}.")

    return AggregatedVerdict(
        number               = number,
        verdict_type         = VerdictType.RELIABLE,
        risk_level           = RiskLevel.NONE,
        confidence           = _clamp(confidence),
        report_count         = 0,
        last_report_date     = None,
        description          = FALLBACK_DESCRIPTION,
        category             = 'pattern_analysis',
        category_label       = category_label('pattern_analysis'),
        source               = SOURCE_NONE,
        found                = False,
        contributing_sources = frozenset(contributing),
        justification        = tuple(why),
        pattern              = pattern,
        external             = external,
        reputation           = reputation,
    )


# ── HELPERS ──────────────────────────────────────────────────

def _contributing_sources(
    local:      Optional[SourceRecord],
    external:   Optional[ExternalSummary],
    reputation: Optional[ReputationResult],
) -> Set[str]:
    sources: Set[str] = set()
    if local is not None:
        sources.add(SOURCE_LOCAL)
    if external is not None:
        sources.update(external.sources)
    if reputation is not None:
        sources.add(SOURCE_REPUTATION)
    return sources


def _clamp(confidence: Any) -> int:
    try:
        value = int(round(float(confidence)))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, value))
