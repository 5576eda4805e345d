"""
phonecheck/errors.py
Error taxonomy.

  InvalidNumberFormat          — input failed validation. Raised before any
                                 source is queried; surfaced to the caller.
  ProviderUnavailable          — one source failed. Always recovered locally
                                 as "no data" for that source.
  ReportDispatchPartialFailure — one or more report destinations refused a
                                 report. Recorded per destination; only raised
                                 on request (ReportReceipt.raise_for_partial_failure).
"""

from typing import Iterable


class PhoneCheckError(Exception):
    """Base class for all phonecheck errors."""


class InvalidNumberFormat(PhoneCheckError, ValueError):

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Invalid French phone number: {raw!r}")


class ProviderUnavailable(PhoneCheckError, RuntimeError):

    def __init__(self, provider: str, reason: str = ''):
        self.provider = provider
        self.reason   = reason
        msg = f"Provider unavailable: {provider}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class ReportDispatchPartialFailure(PhoneCheckError):

    def __init__(self, failed: Iterable[str]):
        self.failed = tuple(failed)
        super().__init__(
            f"Report not accepted by: {', '.join(self.failed) or 'none'}"
        )
