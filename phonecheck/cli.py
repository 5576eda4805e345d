"""
phonecheck/cli.py
Command-line interface for PhoneCheck.

USAGE:
  phonecheck check "06 12 34 56 78"
  phonecheck report 0612345678 --type scam --description "Fake bank advisor"
  phonecheck search microsoft
  phonecheck search --type scam --risk-level high
  phonecheck stats

EXAMPLES:
  # Reproducible, no simulated network latency
  phonecheck --seed 42 --no-latency check +33612345678

  # Machine-readable verdict
  phonecheck check +33612345678 --json

EXIT CODES:
  0 ok / 1 report not accepted / 2 invalid phone number / 3 invalid input
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from phonecheck.config import load_config
from phonecheck.errors import InvalidNumberFormat
from phonecheck.models.record import AggregatedVerdict, RiskLevel
from phonecheck.service import PhoneCheckService

logger = logging.getLogger(__name__)

# ANSI colors
GREEN  = '\033[92m'
YELLOW = '\033[93m'
RED    = '\033[91m'
CYAN   = '\033[96m'
RESET  = '\033[0m'
BOLD   = '\033[1m'

RISK_COLORS = {
    RiskLevel.HIGH:   RED,
    RiskLevel.MEDIUM: YELLOW,
    RiskLevel.LOW:    CYAN,
    RiskLevel.NONE:   GREEN,
}

EXIT_OK             = 0
EXIT_REPORT_FAILED  = 1
EXIT_INVALID_NUMBER = 2
EXIT_INVALID_INPUT  = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = 'phonecheck',
        description = 'PhoneCheck — French phone number risk verdicts from multiple sources',
        formatter_class = argparse.RawDescriptionHelpFormatter,
        epilog = """
NOTE:
  A number with no record anywhere is reported as 'reliable'.
  That means nobody has reported it yet, not that it is verified safe.
        """
    )
    parser.add_argument(
        '--config', '-c',
        type    = Path,
        default = None,
        help    = 'Path to phonecheck_config.json (default: ./phonecheck_config.json)',
    )
    parser.add_argument(
        '--db',
        type    = Path,
        default = None,
        help    = 'Local report database (overrides db_path in config)',
    )
    parser.add_argument(
        '--seed',
        type    = int,
        default = None,
        help    = 'Random seed for the caller-reputation heuristic',
    )
    parser.add_argument(
        '--no-latency',
        action  = 'store_true',
        help    = 'Disable simulated provider latency',
    )
    parser.add_argument(
        '--verbose', '-v',
        action  = 'store_true',
        help    = 'Enable debug logging',
    )

    sub = parser.add_subparsers(dest='command', required=True)

    p_check = sub.add_parser('check', help='Check one phone number')
    p_check.add_argument('number')
    p_check.add_argument('--json', action='store_true', help='Print the verdict as JSON')

    p_report = sub.add_parser('report', help='Report a phone number')
    p_report.add_argument('number')
    p_report.add_argument('--type', '-t', required=True,
                          help='spam, scam, harassment or other')
    p_report.add_argument('--description', '-d', default='')
    p_report.add_argument('--category', default='unknown')
    p_report.add_argument('--experience', default='',
                          help='Free-text account of the call (stored, never logged)')

    p_search = sub.add_parser('search', help='Search reported numbers')
    p_search.add_argument('query', nargs='?', default='')
    p_search.add_argument('--type', '-t', default=None)
    p_search.add_argument('--category', default=None)
    p_search.add_argument('--risk-level', default=None)
    p_search.add_argument('--local-only', action='store_true',
                          help='Do not query external providers')

    sub.add_parser('stats', help='Registry statistics')
    sub.add_parser('sources', help='Configured external providers')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level   = log_level,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    service = PhoneCheckService.from_config(_effective_config(args))

    try:
        if args.command == 'check':
            return _cmd_check(service, args)
        if args.command == 'report':
            return _cmd_report(service, args)
        if args.command == 'search':
            return _cmd_search(service, args)
        if args.command == 'stats':
            return _cmd_stats(service)
        return _cmd_sources(service)
    except InvalidNumberFormat as e:
        _print(f"{RED}Error: {e}{RESET}")
        return EXIT_INVALID_NUMBER
    except ValueError as e:
        # InvalidNumberFormat is a ValueError too; it is handled above
        _print(f"{RED}Error: {e}{RESET}")
        return EXIT_INVALID_INPUT


def _effective_config(args: argparse.Namespace) -> Dict[str, Any]:
    config = load_config(path=args.config)
    if args.db is not None:
        config['db_path'] = str(args.db)
    if args.seed is not None:
        config['random_seed'] = args.seed
    if args.no_latency:
        config['simulate_latency'] = False
    return config


# ── COMMANDS ─────────────────────────────────────────────────

def _cmd_check(service: PhoneCheckService, args: argparse.Namespace) -> int:
    t0 = time.time()
    verdict = asyncio.run(service.check_phone_number(args.number))
    if args.json:
        _print(json.dumps(verdict.to_dict(), indent=2, ensure_ascii=False))
        return EXIT_OK
    _print_verdict(verdict)
    _print(f"\n  {CYAN}checked in {_elapsed(t0)}{RESET}")
    return EXIT_OK


def _cmd_report(service: PhoneCheckService, args: argparse.Namespace) -> int:
    _step(f"Reporting {args.number} as {args.type}...")
    receipt = asyncio.run(service.report_number(args.number, {
        'type':        args.type,
        'description': args.description,
        'category':    args.category,
        'experience':  args.experience,
    }))
    for outcome in receipt.outcomes:
        if outcome.success:
            _ok(f"{outcome.destination}: {outcome.reference}")
        else:
            _fail(f"{outcome.destination}: {outcome.error}")
    if not receipt.success:
        _print(f"\n{RED}Report not accepted ({receipt.report_id}){RESET}")
        return EXIT_REPORT_FAILED
    _print(f"\n{BOLD}{GREEN}✓ Report sent{RESET} ({receipt.report_id})")
    return EXIT_OK


def _cmd_search(service: PhoneCheckService, args: argparse.Namespace) -> int:
    results = asyncio.run(service.search_reports(args.query, {
        'type':             args.type,
        'category':         args.category,
        'risk_level':       args.risk_level,
        'include_external': not args.local_only,
    }))
    if not results:
        _print(f"{YELLOW}No matching numbers.{RESET}")
        return EXIT_OK
    _print(f"\n{BOLD}{len(results)} result(s){RESET}")
    for r in results:
        color = RISK_COLORS.get(RiskLevel.parse(r['risk_level']), RESET)
        _print(
            f"  {r['number']:<14} {color}{r['type']:<10}{RESET} "
            f"{r['report_count']:>5} reports  {r['description']}"
        )
    return EXIT_OK


def _cmd_stats(service: PhoneCheckService) -> int:
    s = service.get_stats()
    _print(f"\n{BOLD}Registry statistics{RESET}")
    _print(f"  Entries        : {s.entries:,}")
    _print(f"  Total reports  : {s.total_reports:,}")
    _print(f"  Scam reports   : {s.total_scams:,}")
    _print(f"  Spam reports   : {s.total_spam:,}")
    _print(f"  Verified safe  : {s.verified_safe:,}")
    _print(f"  User reports   : {s.user_reports:,}")
    if s.top_categories:
        _print(f"\n  Top categories:")
        for c in s.top_categories:
            _print(f"    {c.name:<32} {c.count:>5}  {c.percentage:>5.1f}%")
    return EXIT_OK


def _cmd_sources(service: PhoneCheckService) -> int:
    providers = service.provider_status()
    if not providers:
        _print(f"{YELLOW}No external providers configured.{RESET}")
        return EXIT_OK
    for p in providers:
        reports = 'accepts reports' if p['accepts_reports'] else 'read-only'
        _print(f"  {CYAN}{p['name']:<12}{RESET} free={p['free']} limit={p['daily_limit']} {reports}")
    return EXIT_OK


# ── PRINT HELPERS ────────────────────────────────────────────

def _print_verdict(v: AggregatedVerdict) -> None:
    color = RISK_COLORS.get(v.risk_level, RESET)
    _print(f"\n{BOLD}{v.number}{RESET}")
    _print(f"  Verdict    : {color}{BOLD}{v.verdict_type.value.upper()}{RESET}")
    _print(f"  Risk level : {color}{v.risk_level.value}{RESET}")
    _print(f"  Confidence : {v.confidence}%")
    _print(f"  Reports    : {v.report_count:,}")
    if v.last_report_date:
        _print(f"  Last report: {v.last_report_date.isoformat()}")
    _print(f"  Category   : {v.category_label}")
    _print(f"  Source     : {v.source}")
    if v.description:
        _print(f"  {v.description}")
    _print(f"\n  Why:")
    for line in v.justification:
        _print(f"    • {line}")

def _step(msg):  _print(f"  {CYAN}→{RESET} {msg}")
def _ok(msg):    _print(f"  {GREEN}✓{RESET} {msg}")
def _fail(msg):  _print(f"  {RED}✗{RESET} {msg}")
def _print(msg): print(msg)

def _elapsed(t0: float) -> str:
    s = time.time() - t0
    return f"{s:.1f}s" if s < 60 else f"{int(s//60)}m {int(s%60)}s"


if __name__ == '__main__':
    sys.exit(main())
