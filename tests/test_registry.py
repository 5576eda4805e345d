"""
tests/test_registry.py
Local registry adapter — lookup, search, dataset loading.
"""

import json
from datetime import date

import pytest

from phonecheck.models.record import RiskLevel, VerdictType
from phonecheck.registry.local_registry import LocalRegistry, category_label


class TestLookup:

    def test_packaged_dataset_loads(self, registry):
        assert len(registry) == 16

    def test_known_scam(self, registry):
        rec = registry.lookup('+33612345678')
        assert rec.found
        assert rec.verdict_type == VerdictType.SCAM
        assert rec.risk_level == RiskLevel.HIGH
        assert rec.report_count == 342
        assert rec.last_report_date == date(2024, 1, 21)
        assert rec.category == 'tech_support'
        assert rec.source_name == 'local-registry'

    def test_national_form_resolves_to_international_key(self, registry):
        rec = registry.lookup('0612345678')
        assert rec is not None
        assert rec.report_count == 342

    def test_entry_stored_in_national_form(self, registry):
        assert registry.lookup('0568482050').report_count == 1
        assert registry.lookup('+33568482050').report_count == 1

    def test_unknown_number(self, registry):
        assert registry.lookup('+33698765432') is None
        assert '+33698765432' not in registry

    def test_safe_entry_has_no_last_report(self, registry):
        rec = registry.lookup('+33123456787')
        assert rec.verdict_type == VerdictType.SAFE
        assert rec.last_report_date is None

    def test_entries_are_read_only(self, registry):
        with pytest.raises(TypeError):
            registry._entries['+33600000000'] = {}


class TestSearch:

    def test_empty_query_matches_everything(self, registry):
        assert len(registry.search('')) == 16

    def test_text_match_is_case_insensitive(self, registry):
        hits = registry.search('MICROSOFT')
        assert [n for n, _ in hits] == ['+33612345678']

    def test_matches_category_label(self, registry):
        hits = registry.search('technical support')
        assert {n for n, _ in hits} == {'+33612345678', '+33612345673'}

    def test_filters(self, registry):
        scams = registry.search('', verdict_type='scam')
        assert len(scams) == 7
        assert all(r.verdict_type == VerdictType.SCAM for _, r in scams)

        finance = registry.search('', category='finance')
        assert {n for n, _ in finance} == {'+33123456788', '+33123456782'}

        low = registry.search('', risk_level='low')
        assert all(r.risk_level == RiskLevel.LOW for _, r in low)
        assert len(low) == 2

    def test_filter_and_query_combined(self, registry):
        hits = registry.search('cold calls', verdict_type='spam', risk_level='medium')
        assert {n for n, _ in hits} == {'+33123456786', '+33123456782'}


class TestFromJson:

    def test_custom_file(self, tmp_path):
        path = tmp_path / 'reg.json'
        path.write_text(json.dumps({
            '+33611111111': {'type': 'spam', 'reports': 3, 'riskLevel': 'low',
                             'description': 'x', 'category': 'spam'},
            'broken': 'not a record',
        }), encoding='utf-8')
        reg = LocalRegistry.from_json(path)
        assert len(reg) == 1
        assert reg.lookup('0611111111').verdict_type == VerdictType.SPAM

    def test_non_object_dataset_rejected(self, tmp_path):
        path = tmp_path / 'reg.json'
        path.write_text('[1, 2, 3]', encoding='utf-8')
        with pytest.raises(ValueError):
            LocalRegistry.from_json(path)


def test_category_label():
    assert category_label('tech_support') == 'Fraudulent technical support'
    assert category_label('nope') == 'Uncategorised'
    assert category_label('') == 'Uncategorised'
