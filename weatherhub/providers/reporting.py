"""Sinks for per-call provider outcomes.

The weather service reports every provider attempt here. The default sink
does nothing; a :class:`~weatherhub.providers.registry.ProviderRegistry` can be
used directly as a reporter to drive health tracking.
"""
from __future__ import annotations

import logging
from typing import List, Protocol

from .capabilities import ProviderCallOutcome, ProviderErrorCode, ProviderId
from .errors import ProviderError


logger = logging.getLogger(__name__)


class OutcomeReporter(Protocol):
    def record(self, provider_id: ProviderId, outcome: ProviderCallOutcome) -> None:
        ...


class NoopOutcomeReporter:
    def record(self, provider_id: ProviderId, outcome: ProviderCallOutcome) -> None:
        return None


class SafeOutcomeReporter:
    """Shield the request path from a misbehaving reporter."""

    def __init__(self, inner: OutcomeReporter) -> None:
        self.inner = inner

    def record(self, provider_id: ProviderId, outcome: ProviderCallOutcome) -> None:
        try:
            self.inner.record(provider_id, outcome)
        except Exception as exc:  # noqa: BLE001 - reporting must never fail a request
            logger.error("Outcome reporter %r failed for %s", self.inner, provider_id, exc_info=exc)


class CompositeOutcomeReporter:
    def __init__(self, *reporters: OutcomeReporter) -> None:
        self._reporters: List[SafeOutcomeReporter] = [SafeOutcomeReporter(r) for r in reporters]

    def record(self, provider_id: ProviderId, outcome: ProviderCallOutcome) -> None:
        for reporter in self._reporters:
            reporter.record(provider_id, outcome)


_default_reporter: OutcomeReporter = NoopOutcomeReporter()


def get_default_reporter() -> OutcomeReporter:
    return _default_reporter


def set_default_reporter(reporter: OutcomeReporter) -> OutcomeReporter:
    """Replace the process-wide reporter and return the previous one."""
    global _default_reporter
    previous = _default_reporter
    _default_reporter = reporter
    return previous


def outcome_from_error(exc: BaseException, latency_ms: float) -> ProviderCallOutcome:
    if isinstance(exc, ProviderError):
        return ProviderCallOutcome.failure(
            latency_ms,
            exc.code,
            status=exc.status,
            retry_after_ms=exc.retry_after_ms,
        )
    return ProviderCallOutcome.failure(latency_ms, ProviderErrorCode.UNAVAILABLE)


__all__ = [
    "CompositeOutcomeReporter",
    "NoopOutcomeReporter",
    "OutcomeReporter",
    "SafeOutcomeReporter",
    "get_default_reporter",
    "outcome_from_error",
    "set_default_reporter",
]
