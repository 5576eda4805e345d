"""
phonecheck/api.py
─────────────────────────────────────────────────────────────────────────────
PhoneCheck — Dual-mode API layer

TWO USAGE MODES:
  1. Importable module (scripts, notebooks, other services):
         from phonecheck.api import PhoneCheckAPI
         api = PhoneCheckAPI()
         verdict = api.check("06 12 34 56 78")

  2. FastAPI HTTP server:
         python -m phonecheck.api                   # default: port 8766
         python -m phonecheck.api --port 9000
         uvicorn phonecheck.api:app --port 8766

ENDPOINTS:
  GET  /check/{number}  — aggregated verdict (number URL-encoded: %2B33612345678)
  POST /report          — fan a user report out to every report destination
  GET  /search          — registry search, plus live external data for a number query
  GET  /stats           — registry and user-report statistics
  GET  /sources         — configured external providers
  GET  /health          — server status

CORS: localhost-only. The server binds to 127.0.0.1 by default.

ERRORS:
  400 — invalid French number, or a report without a type
  500 — anything else (logged with traceback)
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from phonecheck import __version__
from phonecheck.config import load_config
from phonecheck.errors import InvalidNumberFormat
from phonecheck.service import PhoneCheckService

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8766


# ═══════════════════════════════════════════════════════════════════════════
# IMPORTABLE CLASS
# ═══════════════════════════════════════════════════════════════════════════

class PhoneCheckAPI:
    """
    Synchronous facade over PhoneCheckService. Every method returns plain
    JSON-ready dicts / lists. Do not call from inside a running event loop;
    use the service's coroutines directly there.

    Usage:
        api = PhoneCheckAPI(config={"simulate_latency": False, "random_seed": 7})
        api.check("+33612345678")["verdict_type"]     # 'scam'
        api.report("0612345678", {"type": "scam", "description": "fake bank"})
    """

    def __init__(
        self,
        config:  Optional[Mapping[str, Any]]    = None,
        service: Optional[PhoneCheckService]    = None,
    ):
        if service is None:
            service = PhoneCheckService.from_config(config if config is not None else load_config())
        self.service = service

    def check(self, number: str) -> Dict[str, Any]:
        return asyncio.run(self.service.check_phone_number(number)).to_dict()

    def report(self, number: str, report: Mapping[str, Any]) -> Dict[str, Any]:
        return asyncio.run(self.service.report_number(number, report)).to_dict()

    def search(self, query: str = '', **filters: Any) -> List[Dict[str, Any]]:
        return asyncio.run(self.service.search_reports(query, filters))

    def stats(self) -> Dict[str, Any]:
        return self.service.get_stats().to_dict()

    def sources(self) -> List[Dict[str, Any]]:
        return self.service.provider_status()


# ═══════════════════════════════════════════════════════════════════════════
# FASTAPI APP
# ═══════════════════════════════════════════════════════════════════════════

class ReportRequest(BaseModel):
    number:      str
    type:        str = Field(..., min_length=1)
    description: str = ''
    category:    str = 'unknown'
    experience:  str = ''


def _build_app(
    config:  Optional[Mapping[str, Any]] = None,
    service: Optional[PhoneCheckService] = None,
) -> FastAPI:
    """
    Build and return the FastAPI application instance.
    Called once at module level or on demand (tests, __main__).
    """
    _api = PhoneCheckAPI(config=config, service=service)
    _service = _api.service

    _app = FastAPI(
        title       = "PhoneCheck API",
        description = "French phone number risk verdicts from multiple sources",
        version     = __version__,
        docs_url    = "/docs",
        redoc_url   = None,
    )

    _app.add_middleware(
        CORSMiddleware,
        allow_origins     = [
            "http://localhost",
            f"http://localhost:{DEFAULT_PORT}",
            "http://127.0.0.1",
            f"http://127.0.0.1:{DEFAULT_PORT}",
            "null",   # file:// origin
        ],
        allow_methods     = ["GET", "POST", "OPTIONS"],
        allow_headers     = ["Content-Type"],
        allow_credentials = False,
    )

    # ── ENDPOINTS ───────────────────────────────────────────────────────

    @_app.get("/check/{number}", summary="Check one phone number")
    async def check(number: str):
        try:
            verdict = await _service.check_phone_number(number)
        except InvalidNumberFormat as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except Exception as exc:
            logger.error(f"Check endpoint error: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))
        return verdict.to_dict()

    @_app.post("/report", summary="Report a phone number")
    async def report(req: ReportRequest):
        """
        Dispatches the report to the local store and every provider that
        accepts reports. success follows the configured policy; the per
        destination outcome is in 'destinations'.
        """
        try:
            receipt = await _service.report_number(req.number, {
                "type":        req.type,
                "description": req.description,
                "category":    req.category,
                "experience":  req.experience,
            })
        except (InvalidNumberFormat, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except Exception as exc:
            logger.error(f"Report endpoint error: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))
        return receipt.to_dict()

    @_app.get("/search", summary="Search reported numbers")
    async def search(
        q:                str           = Query("",   description="Number or free text"),
        type:             Optional[str] = Query(None, description="scam, spam, suspicious, safe"),
        category:         Optional[str] = Query(None),
        risk_level:       Optional[str] = Query(None, description="none, low, medium, high"),
        include_external: bool          = Query(True),
    ):
        try:
            results = await _service.search_reports(q, {
                "type":             type,
                "category":         category,
                "risk_level":       risk_level,
                "include_external": include_external,
            })
        except Exception as exc:
            logger.error(f"Search endpoint error: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))
        return {"count": len(results), "results": results}

    @_app.get("/stats", summary="Registry statistics")
    def stats():
        try:
            return _api.stats()
        except Exception as exc:
            raise HTTPException(status_code=500, detail=str(exc))

    @_app.get("/sources", summary="Configured external providers")
    def sources():
        return {"sources": _api.sources()}

    @_app.get("/health", summary="Health check")
    def health():
        return {
            "status":           "ok",
            "registry_entries": len(_service.registry),
            "providers":        len(_service.external.providers),
            "version":          __version__,
        }

    return _app


# Module-level app instance — used by uvicorn phonecheck.api:app
app = _build_app()


# ═══════════════════════════════════════════════════════════════════════════
# CLI ENTRYPOINT — python -m phonecheck.api
# ═══════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(
        prog        = "phonecheck.api",
        description = "PhoneCheck API Server",
    )
    parser.add_argument("--port",   type=int, default=DEFAULT_PORT,
                        help=f"Port to bind (default: {DEFAULT_PORT})")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to phonecheck_config.json (default: ./phonecheck_config.json)")
    parser.add_argument("--host",   type=str, default="127.0.0.1",
                        help="Host to bind — DO NOT change to 0.0.0.0 on shared networks")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    cfg = load_config(path=Path(args.config) if args.config else None)
    server_app = _build_app(config=cfg)

    print(f"""
+--------------------------------------------------+
|   PhoneCheck API Server v{__version__:<24}|
+--------------------------------------------------+
|  Local:    http://{args.host}:{args.port}
|  Docs:     http://{args.host}:{args.port}/docs
|  Health:   http://{args.host}:{args.port}/health
+--------------------------------------------------+
""")

    uvicorn.run(
        server_app,
        host      = args.host,
        port      = args.port,
        log_level = "info",
    )
