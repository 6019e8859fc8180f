from __future__ import annotations

import logging

import pytest

from weatherhub.providers.capabilities import ProviderCallOutcome, ProviderErrorCode
from weatherhub.providers.errors import ProviderError, QuotaExceeded
from weatherhub.providers.reporting import (
    CompositeOutcomeReporter,
    NoopOutcomeReporter,
    SafeOutcomeReporter,
    get_default_reporter,
    outcome_from_error,
    set_default_reporter,
)


class RecordingReporter:
    def __init__(self) -> None:
        self.calls = []

    def record(self, provider_id, outcome) -> None:
        self.calls.append((provider_id, outcome))


class ExplodingReporter:
    def record(self, provider_id, outcome) -> None:
        raise RuntimeError("sink unavailable")


def test_default_reporter_is_noop_and_replaceable() -> None:
    assert isinstance(get_default_reporter(), NoopOutcomeReporter)
    recorder = RecordingReporter()

    previous = set_default_reporter(recorder)
    try:
        assert get_default_reporter() is recorder
    finally:
        set_default_reporter(previous)

    assert get_default_reporter() is previous


def test_safe_reporter_logs_and_swallows_errors(caplog) -> None:
    reporter = SafeOutcomeReporter(ExplodingReporter())

    with caplog.at_level(logging.ERROR):
        reporter.record("nws", ProviderCallOutcome.success(12.0))

    assert "failed for nws" in caplog.text


def test_composite_reporter_fans_out_past_failures() -> None:
    first, second = RecordingReporter(), RecordingReporter()
    reporter = CompositeOutcomeReporter(first, ExplodingReporter(), second)
    outcome = ProviderCallOutcome.success(3.0)

    reporter.record("openweather", outcome)

    assert first.calls == [("openweather", outcome)]
    assert second.calls == [("openweather", outcome)]


def test_outcome_from_provider_error_keeps_classification() -> None:
    exc = QuotaExceeded(provider="openweather", status=429, retry_after_ms=30_000)

    outcome = outcome_from_error(exc, 42.0)

    assert outcome.ok is False
    assert outcome.code is ProviderErrorCode.RATE_LIMIT
    assert outcome.status == 429
    assert outcome.retry_after_ms == 30_000
    assert outcome.latency_ms == 42.0


@pytest.mark.parametrize(
    "exc, expected",
    [
        (ProviderError("boom", code=ProviderErrorCode.PARSE), ProviderErrorCode.PARSE),
        (RuntimeError("unexpected"), ProviderErrorCode.UNAVAILABLE),
    ],
)
def test_outcome_from_other_errors(exc, expected) -> None:
    assert outcome_from_error(exc, 1.0).code is expected
