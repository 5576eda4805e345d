"""
tests/test_api.py
─────────────────────────────────────────────────────────────────────────────
Tests for phonecheck.api — PhoneCheckAPI class and the FastAPI endpoints.

Every app is built from an offline config: simulated providers only, no
latency, seeded heuristic, temporary report database.
"""

import pytest
from fastapi.testclient import TestClient

from phonecheck.api import PhoneCheckAPI, _build_app


@pytest.fixture
def client(offline_config):
    return TestClient(_build_app(config=offline_config))


# ── IMPORTABLE CLASS ─────────────────────────────────────────────────────────

class TestPhoneCheckAPI:

    def test_check(self, offline_config):
        api = PhoneCheckAPI(config=offline_config)
        verdict = api.check('+33612345678')
        assert verdict['verdict_type'] == 'scam'
        assert verdict['risk_level'] == 'high'
        assert verdict['confidence'] == 60

    def test_report_and_stats(self, offline_config):
        api = PhoneCheckAPI(config=offline_config)
        receipt = api.report('0611223344', {'type': 'spam', 'description': 'robocall'})
        assert receipt['success']
        assert receipt['destinations'] == {'local': True, 'scamalert': True}
        assert api.stats()['user_reports'] == 1

    def test_search(self, offline_config):
        results = PhoneCheckAPI(config=offline_config).search('insurance', include_external=False)
        assert [r['number'] for r in results] == ['+33612345674']

    def test_sources(self, offline_config):
        assert [s['name'] for s in PhoneCheckAPI(config=offline_config).sources()] == ['scamalert']


# ── HTTP ENDPOINTS ───────────────────────────────────────────────────────────

class TestEndpoints:

    def test_health(self, client):
        body = client.get('/health').json()
        assert body['status'] == 'ok'
        assert body['registry_entries'] == 16

    def test_check(self, client):
        resp = client.get('/check/%2B33612345678')
        assert resp.status_code == 200
        body = resp.json()
        assert body['number'] == '+33612345678'
        assert body['verdict_type'] == 'scam'
        assert body['source'] == 'local-registry'
        assert body['justification']

    def test_check_invalid_number(self, client):
        resp = client.get('/check/12345')
        assert resp.status_code == 400
        assert 'Invalid French phone number' in resp.json()['detail']

    def test_report(self, client):
        resp = client.post('/report', json={
            'number': '+33611223344', 'type': 'scam', 'description': 'Fake bank advisor',
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body['success']
        assert body['destinations']['local'] is True

    def test_report_invalid_number(self, client):
        resp = client.post('/report', json={'number': 'abc', 'type': 'scam'})
        assert resp.status_code == 400

    def test_report_requires_type(self, client):
        resp = client.post('/report', json={'number': '+33611223344', 'type': ''})
        assert resp.status_code == 422

    def test_search(self, client):
        body = client.get('/search', params={'type': 'scam', 'include_external': 'false'}).json()
        assert body['count'] == 7
        assert body['results'][0]['report_count'] == 342

    def test_stats(self, client):
        body = client.get('/stats').json()
        assert body['entries'] == 16
        assert body['total_reports'] == 2315

    def test_sources(self, client):
        assert client.get('/sources').json()['sources'][0]['name'] == 'scamalert'
