"""
tests/test_stats.py
Registry statistics.
"""

import asyncio
from collections import Counter

from phonecheck.models.record import ReportPayload
from phonecheck.reporting.sqlite_store import LocalReportStore
from phonecheck.stats import compute_stats, top_categories


def test_packaged_registry_totals(registry):
    s = compute_stats(registry)
    assert s.entries == 16
    assert s.total_scams == 1664
    assert s.total_spam == 651
    assert s.total_reports == 2315
    assert s.verified_safe == 1
    assert s.user_reports == 0
    assert s.generated_at


def test_top_categories_folded(registry):
    rows = compute_stats(registry).top_categories
    assert len(rows) == 6
    assert rows[0].name == 'Fraudulent technical support'
    assert rows[0].count == 640
    assert rows[0].percentage == 27.6
    assert rows[-1].name == 'Other'
    assert sum(r.count for r in rows) == 2315


def test_top_categories_short_list_not_folded():
    rows = top_categories(Counter({'A': 3, 'B': 1, 'C': 0}), 4)
    assert [(r.name, r.count, r.percentage) for r in rows] == [('A', 3, 75.0), ('B', 1, 25.0)]


def test_empty_total():
    assert top_categories(Counter(), 0) == []


def test_user_reports_from_store(registry, tmp_path):
    store = LocalReportStore(tmp_path / 'r.db')
    asyncio.run(store.submit('+33612345678', ReportPayload('scam', 'x')))
    assert compute_stats(registry, store).user_reports == 1


def test_to_dict(registry):
    d = compute_stats(registry).to_dict()
    assert d['top_categories'][0]['name'] == 'Fraudulent technical support'
