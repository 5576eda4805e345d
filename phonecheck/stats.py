"""
phonecheck/stats.py
Dashboard statistics over the local registry and the local report store.
Read-only; safe to call at any time.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from phonecheck.models.record import VerdictType
from phonecheck.registry.local_registry import LocalRegistry, category_label

if TYPE_CHECKING:
    from phonecheck.reporting.sqlite_store import LocalReportStore

logger = logging.getLogger(__name__)

MAX_CATEGORY_ROWS = 6
OTHER_LABEL       = 'Other'


@dataclass
class CategoryShare:
    name:       str
    count:      int
    percentage: float


@dataclass
class StatsSummary:
    """Registry totals plus the number of user reports stored locally."""
    total_reports:  int
    total_scams:    int
    total_spam:     int
    verified_safe:  int
    entries:        int
    top_categories: List[CategoryShare] = field(default_factory=list)
    user_reports:   int                 = 0
    generated_at:   str                 = ''

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_stats(
    registry: LocalRegistry,
    store:    Optional["LocalReportStore"] = None,
) -> StatsSummary:
    total_reports = 0
    by_type: Counter = Counter()
    by_category: Counter = Counter()
    verified_safe = 0

    for _number, record in registry.items():
        total_reports += record.report_count
        by_type[record.verdict_type] += record.report_count
        by_category[category_label(record.category)] += record.report_count
        if record.verdict_type == VerdictType.SAFE:
            verified_safe += 1

    user_reports = 0
    if store is not None:
        user_reports = store.count()

    summary = StatsSummary(
        total_reports  = total_reports,
        total_scams    = by_type[VerdictType.SCAM],
        total_spam     = by_type[VerdictType.SPAM],
        verified_safe  = verified_safe,
        entries        = len(registry),
        top_categories = top_categories(by_category, total_reports),
        user_reports   = user_reports,
        generated_at   = datetime.now(timezone.utc).isoformat(),
    )
    logger.debug(
        f"Stats: entries={summary.entries} reports={summary.total_reports} "
        f"user_reports={summary.user_reports}"
    )
    return summary


def top_categories(counts: Counter, total: int) -> List[CategoryShare]:
    """
    Largest categories first. Beyond MAX_CATEGORY_ROWS rows, the tail is
    folded into a single 'Other' row so the rows always sum to total.
    """
    ranked = [(name, n) for name, n in counts.most_common() if n > 0]
    if len(ranked) > MAX_CATEGORY_ROWS:
        head  = ranked[:MAX_CATEGORY_ROWS - 1]
        other = sum(n for _name, n in ranked[MAX_CATEGORY_ROWS - 1:])
        ranked = head + [(OTHER_LABEL, other)]

    return [
        CategoryShare(
            name       = name,
            count      = n,
            percentage = round(100.0 * n / total, 1) if total else 0.0,
        )
        for name, n in ranked
    ]
