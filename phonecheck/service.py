"""
phonecheck/service.py
Caller-facing operations: check, report, search, stats.

PhoneCheckService holds no per-call state. Every collaborator is passed in,
so tests can swap any source for a stub; from_config() wires the default
set from a config dict.

CHECK FLOW:
  raw → canonicalize (raises InvalidNumberFormat, nothing else runs)
      → registry lookup ┐
      → external fan-out├ concurrently, each failure → "no data"
      → reputation      ┘
      → build_verdict → AggregatedVerdict
"""

from __future__ import annotations

import asyncio
import logging
import random
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from phonecheck.analysis.aggregator import FALLBACK_CONFIDENCE, StageHook, build_verdict
from phonecheck.analysis.patterns import analyze_patterns
from phonecheck.errors import InvalidNumberFormat
from phonecheck.models.record import (
    AggregatedVerdict,
    ExternalSummary,
    ReportPayload,
    ReportReceipt,
    ReputationResult,
    SourceRecord,
)
from phonecheck.numbers import canonicalize
from phonecheck.providers.external import ExternalAggregateAdapter
from phonecheck.providers.numverify import DEFAULT_URL as NUMVERIFY_URL, NumVerifyProvider
from phonecheck.providers.reputation import ReputationHeuristicAdapter
from phonecheck.providers.scamalert import DEFAULT_LATENCY_SEC, CommunityScamProvider
from phonecheck.registry.local_registry import LocalRegistry, category_label
from phonecheck.reporting.sink import ProviderReportDestination, ReportFanOutSink
from phonecheck.reporting.sqlite_store import LocalReportStore
from phonecheck.stats import StatsSummary, compute_stats

logger = logging.getLogger(__name__)

SEARCH_SOURCE_LOCAL    = 'local-registry'
SEARCH_SOURCE_EXTERNAL = 'external-aggregate'


class PhoneCheckService:
    """
    Usage:
        service = PhoneCheckService.from_config(load_config())
        verdict = await service.check_phone_number("06 12 34 56 78")
        receipt = await service.report_number("0612345678", {"type": "scam", "description": "..."})
    """

    def __init__(
        self,
        registry:            LocalRegistry,
        external:            ExternalAggregateAdapter,
        reputation:          ReputationHeuristicAdapter,
        sink:                Optional[ReportFanOutSink]  = None,
        store:               Optional[LocalReportStore]  = None,
        hook:                Optional[StageHook]         = None,
        fallback_confidence: int                         = FALLBACK_CONFIDENCE,
    ):
        self.registry            = registry
        self.external            = external
        self.reputation          = reputation
        self.store               = store
        self.sink                = sink if sink is not None else ReportFanOutSink([store] if store else [])
        self.hook                = hook
        self.fallback_confidence = fallback_confidence

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'PhoneCheckService':
        registry_path = config.get('registry_path')
        registry = LocalRegistry.from_json(Path(registry_path) if registry_path else None)

        seed     = config.get('random_seed')
        rng      = random.Random(seed) if seed is not None else random.Random()
        simulate = bool(config.get('simulate_latency', True))

        providers = []
        if config.get('scamalert_enabled', True):
            providers.append(CommunityScamProvider(
                latency_sec     = DEFAULT_LATENCY_SEC if simulate else 0.0,
                accepts_reports = bool(config.get('scamalert_accepts_reports', True)),
            ))
        if config.get('numverify_enabled'):
            if config.get('numverify_key'):
                providers.append(NumVerifyProvider(
                    api_key     = config['numverify_key'],
                    base_url    = config.get('numverify_url') or NUMVERIFY_URL,
                    timeout_sec = float(config.get('numverify_timeout') or 10.0),
                ))
            else:
                logger.warning("NumVerify enabled but no API key configured — skipping")

        store = LocalReportStore(Path(config.get('db_path') or 'phonecheck_reports.db'))
        destinations = [store] + [
            ProviderReportDestination(p) for p in providers if p.accepts_reports
        ]

        return cls(
            registry            = registry,
            external            = ExternalAggregateAdapter(providers),
            reputation          = ReputationHeuristicAdapter(
                rng     = rng,
                seed    = seed,
                latency = (0.5, 1.5) if simulate else (0.0, 0.0),
            ),
            sink                = ReportFanOutSink(destinations, policy=config.get('report_success_policy') or 'any'),
            store               = store,
            fallback_confidence = int(config.get('fallback_confidence', FALLBACK_CONFIDENCE)),
        )

    # ── CHECK ────────────────────────────────────────────────

    async def check_phone_number(self, raw: str) -> AggregatedVerdict:
        number = canonicalize(raw)

        local, external, reputation = await asyncio.gather(
            self._lookup_local(number),
            self.external.query_all(number),
            self.reputation.query(number),
            return_exceptions=True,
        )
        local      = _settled('local-registry', local, SourceRecord)
        external   = _settled('external-aggregate', external, ExternalSummary)
        reputation = _settled('reputation-heuristic', reputation, ReputationResult)

        verdict = build_verdict(
            number,
            local,
            external,
            reputation,
            pattern             = analyze_patterns(number),
            hook                = self.hook,
            fallback_confidence = self.fallback_confidence,
        )
        logger.info(
            f"Check complete: {number} → {verdict.verdict_type.value} "
            f"({verdict.risk_level.value}, confidence {verdict.confidence}, source {verdict.source})"
        )
        return verdict

    async def _lookup_local(self, number: str) -> Optional[SourceRecord]:
        return self.registry.lookup(number)

    # ── REPORT ───────────────────────────────────────────────

    async def report_number(
        self,
        raw:    str,
        report: Union[ReportPayload, Mapping[str, Any]],
    ) -> ReportReceipt:
        number  = canonicalize(raw)
        payload = coerce_report(report)
        return await self.sink.submit(number, payload)

    # ── SEARCH ───────────────────────────────────────────────

    async def search_reports(
        self,
        query:   str                          = '',
        filters: Optional[Mapping[str, Any]]  = None,
    ) -> List[Dict[str, Any]]:
        """
        Registry matches plus, when the query is itself a valid number, the
        live external summary for it. Sorted by report count, highest first.

        filters: type, category, risk_level, include_external (default True).
        """
        filters = filters or {}
        results = [
            _registry_hit(number, record)
            for number, record in self.registry.search(
                query,
                verdict_type = filters.get('type'),
                category     = filters.get('category'),
                risk_level   = filters.get('risk_level'),
            )
        ]

        if filters.get('include_external', True) and query:
            hit = await self._external_hit(query)
            if hit is not None:
                results.append(hit)

        results.sort(key=lambda r: r['report_count'], reverse=True)
        return results

    async def _external_hit(self, query: str) -> Optional[Dict[str, Any]]:
        try:
            number = canonicalize(query)
        except InvalidNumberFormat:
            return None
        try:
            summary = await self.external.query_all(number)
        except Exception as e:
            logger.warning(f"External search failed for {number}: {e}")
            return None
        if summary.total_reports <= 0:
            return None
        return {
            'number':           number,
            'type':             summary.verdict_type.value,
            'risk_level':       summary.risk_level.value,
            'report_count':     summary.total_reports,
            'last_report_date': summary.last_report_date.isoformat() if summary.last_report_date else None,
            'description':      summary.description,
            'category':         'external',
            'category_label':   category_label('external'),
            'confidence':       summary.confidence,
            'source':           SEARCH_SOURCE_EXTERNAL,
        }

    # ── STATUS ───────────────────────────────────────────────

    def get_stats(self) -> StatsSummary:
        return compute_stats(self.registry, self.store)

    def provider_status(self) -> List[Dict[str, Any]]:
        return [p.describe() for p in self.external.providers]


# ── HELPERS ──────────────────────────────────────────────────

def coerce_report(report: Union[ReportPayload, Mapping[str, Any]]) -> ReportPayload:
    """Accept a ReportPayload or a plain mapping with type / description / category / experience."""
    if isinstance(report, ReportPayload):
        payload = report
    else:
        payload = ReportPayload(
            verdict_type = str(report.get('type') or report.get('verdict_type') or '').strip(),
            description  = str(report.get('description') or '').strip(),
            category     = str(report.get('category') or 'unknown'),
            experience   = str(report.get('experience') or ''),
        )
    if not payload.verdict_type:
        raise ValueError("Report type is required")
    return payload


def _settled(source: str, value: Any, expected: type) -> Any:
    """gather() result → value, or None when the source failed."""
    if isinstance(value, BaseException):
        if not isinstance(value, Exception):
            raise value
        logger.warning(f"Source {source} failed, treating as no data: {value}")
        return None
    if value is not None and not isinstance(value, expected):
        logger.warning(f"Source {source} returned {type(value).__name__}, treating as no data")
        return None
    return value


def _registry_hit(number: str, record: SourceRecord) -> Dict[str, Any]:
    return {
        'number':           number,
        'type':             record.verdict_type.value,
        'risk_level':       record.risk_level.value,
        'report_count':     record.report_count,
        'last_report_date': record.last_report_date.isoformat() if record.last_report_date else None,
        'description':      record.description,
        'category':         record.category,
        'category_label':   category_label(record.category),
        'source':           SEARCH_SOURCE_LOCAL,
    }
