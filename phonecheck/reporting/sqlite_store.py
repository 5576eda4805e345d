"""
phonecheck/reporting/sqlite_store.py
Local report store — the "local" destination of the report fan-out sink.

SCHEMA DESIGN NOTES:
- reports holds one row per user report, never updated or deleted
- phonecheck_meta stores the schema version, written once per database
- number is stored in canonical form; lookups by number try both the
  +33 and 0 spellings of the same line
- submitted_at is stored as INTEGER milliseconds (Unix epoch * 1000)

The experience free text is persisted but never logged.
"""

import asyncio
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from phonecheck.models.record import ReportPayload
from phonecheck.numbers import alternate_form
from phonecheck.reporting.sink import ReportDestination

logger = logging.getLogger(__name__)

SCHEMA_VERSION = '1.0'
DESTINATION_ID = 'local'


class LocalReportStore(ReportDestination):
    """
    Usage:
        store = LocalReportStore(Path("phonecheck_reports.db"))
        ref   = await store.submit("+33612345678", ReportPayload("scam", "fake bank"))
        rows  = store.list_reports("+33612345678")
    """

    destination_id = DESTINATION_ID

    def __init__(self, db_path: Path):
        self.db_path      = Path(db_path)
        self._initialised = False
        self._init_lock   = threading.Lock()   # submits run in worker threads

    async def submit(self, number: str, report: ReportPayload) -> str:
        """Persist one report. Returns LOCAL-<row id>."""
        row_id = await asyncio.to_thread(self._insert, number, report)
        reference = f"LOCAL-{row_id}"
        logger.info(f"Report stored locally: ref={reference} type={report.verdict_type}")
        return reference

    # ── QUERIES ──────────────────────────────────────────────

    def list_reports(self, number: Optional[str] = None, limit: int = 50) -> List[Dict[str, Any]]:
        """Most recent first. number=None lists every report."""
        conn = self._connect()
        try:
            if number:
                cur = conn.execute("""
                    SELECT id, number, verdict_type, category, description,
                           experience, submitted_at
                    FROM reports
                    WHERE number IN (?, ?)
                    ORDER BY submitted_at DESC, id DESC
                    LIMIT ?
                """, (number, alternate_form(number), int(limit)))
            else:
                cur = conn.execute("""
                    SELECT id, number, verdict_type, category, description,
                           experience, submitted_at
                    FROM reports
                    ORDER BY submitted_at DESC, id DESC
                    LIMIT ?
                """, (int(limit),))
            return [_row_to_dict(row) for row in cur.fetchall()]
        finally:
            conn.close()

    def count(self, number: Optional[str] = None) -> int:
        conn = self._connect()
        try:
            if number:
                row = conn.execute(
                    "SELECT COUNT(*) FROM reports WHERE number IN (?, ?)",
                    (number, alternate_form(number)),
                ).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) FROM reports").fetchone()
            return int(row[0])
        finally:
            conn.close()

    # ── INTERNALS ────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")   # Safe concurrent reads
        if not self._initialised:
            with self._init_lock:
                if not self._initialised:
                    try:
                        _create_schema(conn)
                        _write_meta(conn)
                        conn.commit()
                    except Exception:
                        conn.close()
                        raise
                    self._initialised = True
        return conn

    def _insert(self, number: str, report: ReportPayload) -> int:
        conn = self._connect()
        try:
            cur = conn.execute("""
                INSERT INTO reports
                (number, verdict_type, category, description, experience, submitted_at)
                VALUES (?,?,?,?,?,?)
            """, (
                number,
                report.verdict_type,
                report.category,
                report.description,
                report.experience,
                _to_ms(report.submitted_at),
            ))
            conn.commit()
            return int(cur.lastrowid)
        except Exception as e:
            conn.rollback()
            logger.error(f"Local report store write failed: {e}")
            raise
        finally:
            conn.close()


# ── SCHEMA ───────────────────────────────────────────────────

def _create_schema(conn: sqlite3.Connection) -> None:
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS phonecheck_meta (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            created_at      TEXT    NOT NULL,
            schema_version  TEXT    NOT NULL
        );

        CREATE TABLE IF NOT EXISTS reports (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            number          TEXT    NOT NULL,
            verdict_type    TEXT    NOT NULL,
            category        TEXT    DEFAULT 'unknown',
            description     TEXT,
            experience      TEXT,
            submitted_at    INTEGER NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_reports_number ON reports(number);
        CREATE INDEX IF NOT EXISTS idx_reports_ts     ON reports(submitted_at);
    """)


def _write_meta(conn: sqlite3.Connection) -> None:
    # single statement: a second opener never adds a second version row
    conn.execute("""
        INSERT INTO phonecheck_meta (created_at, schema_version)
        SELECT ?, ?
        WHERE NOT EXISTS (SELECT 1 FROM phonecheck_meta)
    """, (datetime.now(timezone.utc).isoformat(), SCHEMA_VERSION))


def _to_ms(ts: datetime) -> int:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return int(ts.timestamp() * 1000)


def _row_to_dict(row) -> Dict[str, Any]:
    rid, number, verdict_type, category, description, experience, ts_ms = row
    return {
        'id':           rid,
        'reference':    f"LOCAL-{rid}",
        'number':       number,
        'type':         verdict_type,
        'category':     category,
        'description':  description,
        'experience':   experience,
        'submitted_at': datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc).isoformat(),
    }
