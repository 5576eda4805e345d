"""
tests/test_reporting.py
Report fan-out sink and the local SQLite report store.
"""

import asyncio
import sqlite3
from datetime import datetime, timezone

import pytest

from phonecheck.errors import ReportDispatchPartialFailure
from phonecheck.models.record import ReportPayload
from phonecheck.reporting.sink import ReportDestination, ReportFanOutSink
from phonecheck.reporting.sqlite_store import SCHEMA_VERSION, LocalReportStore


class _Accepting(ReportDestination):

    def __init__(self, destination_id, reference='REF-1'):
        self.destination_id = destination_id
        self.reference      = reference
        self.received       = []

    async def submit(self, number, report):
        self.received.append((number, report))
        return self.reference


class _Refusing(ReportDestination):

    def __init__(self, destination_id):
        self.destination_id = destination_id

    async def submit(self, number, report):
        raise ConnectionError(f"{self.destination_id} unreachable")


# ── SINK ─────────────────────────────────────────────────────

class TestFanOutSink:

    def test_identical_payload_to_every_destination(self, payload):
        a, b = _Accepting('local'), _Accepting('scamalert')
        receipt = asyncio.run(ReportFanOutSink([a, b]).submit('+33612345678', payload))
        assert receipt.success
        assert a.received == b.received == [('+33612345678', payload)]
        assert {o.reference for o in receipt.outcomes} == {'REF-1'}

    def test_partial_failure_any_policy(self, payload):
        local, remote = _Accepting('local'), _Refusing('scamalert')
        receipt = asyncio.run(ReportFanOutSink([local, remote]).submit('+33612345678', payload))
        assert receipt.success
        assert receipt.by_destination() == {'local': True, 'scamalert': False}
        assert 'unreachable' in receipt.outcomes[1].error
        # no rollback of the accepted destination
        assert len(local.received) == 1

    def test_all_fail(self, payload):
        receipt = asyncio.run(ReportFanOutSink([_Refusing('local'), _Refusing('x')]).submit('+33612345678', payload))
        assert not receipt.success

    def test_zero_destinations_is_failure(self, payload):
        receipt = asyncio.run(ReportFanOutSink([]).submit('+33612345678', payload))
        assert not receipt.success
        assert receipt.outcomes == ()

    def test_all_policy(self, payload):
        sink = ReportFanOutSink([_Accepting('local'), _Refusing('x')], policy='all')
        assert not asyncio.run(sink.submit('+33612345678', payload)).success

    def test_local_policy(self, payload):
        only_remote = ReportFanOutSink([_Refusing('local'), _Accepting('x')], policy='local')
        assert not asyncio.run(only_remote.submit('+33612345678', payload)).success

        only_local = ReportFanOutSink([_Accepting('local'), _Refusing('x')], policy='local')
        assert asyncio.run(only_local.submit('+33612345678', payload)).success

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            ReportFanOutSink([], policy='most')

    def test_strict_callers_can_raise(self, payload):
        receipt = asyncio.run(
            ReportFanOutSink([_Accepting('local'), _Refusing('x')]).submit('+33612345678', payload)
        )
        with pytest.raises(ReportDispatchPartialFailure) as exc:
            receipt.raise_for_partial_failure()
        assert exc.value.failed == ('x',)

    def test_receipt_to_dict(self, payload):
        receipt = asyncio.run(ReportFanOutSink([_Accepting('local')]).submit('+33612345678', payload))
        d = receipt.to_dict()
        assert d['destinations'] == {'local': True}
        assert d['report_id'].startswith('MULTI-')


# ── LOCAL STORE ──────────────────────────────────────────────

class TestLocalReportStore:

    def test_submit_returns_local_reference(self, tmp_path, payload):
        store = LocalReportStore(tmp_path / 'r.db')
        assert asyncio.run(store.submit('+33612345678', payload)) == 'LOCAL-1'
        assert asyncio.run(store.submit('+33612345678', payload)) == 'LOCAL-2'
        assert store.count() == 2

    def test_list_reports_newest_first(self, tmp_path):
        store = LocalReportStore(tmp_path / 'r.db')
        old = ReportPayload('spam', 'old', submitted_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        new = ReportPayload('scam', 'new', experience='called twice',
                            submitted_at=datetime(2024, 2, 1, tzinfo=timezone.utc))
        asyncio.run(store.submit('+33612345678', old))
        asyncio.run(store.submit('+33612345678', new))

        rows = store.list_reports()
        assert [r['description'] for r in rows] == ['new', 'old']
        assert rows[0]['type'] == 'scam'
        assert rows[0]['experience'] == 'called twice'
        assert rows[0]['submitted_at'].startswith('2024-02-01')
        assert rows[0]['reference'] == 'LOCAL-2'

    def test_both_spellings_of_a_number(self, tmp_path, payload):
        store = LocalReportStore(tmp_path / 'r.db')
        asyncio.run(store.submit('0612345678', payload))
        asyncio.run(store.submit('+33612345678', payload))
        asyncio.run(store.submit('+33698765432', payload))
        assert store.count('+33612345678') == 2
        assert len(store.list_reports('0612345678')) == 2
        assert store.count() == 3

    def test_limit(self, tmp_path, payload):
        store = LocalReportStore(tmp_path / 'r.db')
        for _ in range(5):
            asyncio.run(store.submit('+33612345678', payload))
        assert len(store.list_reports(limit=3)) == 3

    def test_schema_version_written_once(self, tmp_path, payload):
        db = tmp_path / 'r.db'
        asyncio.run(LocalReportStore(db).submit('+33612345678', payload))
        LocalReportStore(db).count()
        conn = sqlite3.connect(str(db))
        rows = conn.execute("SELECT schema_version FROM phonecheck_meta").fetchall()
        conn.close()
        assert rows == [(SCHEMA_VERSION,)]

    def test_concurrent_first_submits_write_one_meta_row(self, tmp_path, payload):
        db    = tmp_path / 'r.db'
        store = LocalReportStore(db)

        async def burst():
            return await asyncio.gather(*(store.submit('+33612345678', payload) for _ in range(8)))

        refs = asyncio.run(burst())
        conn = sqlite3.connect(str(db))
        rows = conn.execute("SELECT schema_version FROM phonecheck_meta").fetchall()
        conn.close()
        assert rows == [(SCHEMA_VERSION,)]
        assert len(set(refs)) == 8
        assert store.count() == 8

    def test_empty_store(self, tmp_path):
        store = LocalReportStore(tmp_path / 'r.db')
        assert store.count() == 0
        assert store.list_reports() == []

    def test_experience_not_logged(self, tmp_path, caplog):
        store = LocalReportStore(tmp_path / 'r.db')
        report = ReportPayload('scam', 'd', experience='my bank PIN is 1234')
        with caplog.at_level('DEBUG'):
            asyncio.run(store.submit('+33612345678', report))
        assert 'PIN' not in caplog.text
