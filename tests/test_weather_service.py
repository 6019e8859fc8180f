from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from weatherhub.cache import WeatherCache
from weatherhub.entities import Measurement, WeatherData
from weatherhub.errors import (
    ConfigurationError,
    InvalidCoordinatesError,
    InvalidProviderLocationError,
    NoProviderAvailableError,
    ProviderNotSupportedError,
)
from weatherhub.geo import bucket_center
from weatherhub.providers.capabilities import (
    CircuitConfig,
    CircuitState,
    FallbackPolicyConfig,
    ProviderCallOutcome,
    ProviderCapability,
    ProviderErrorCode,
    ProviderSupport,
)
from weatherhub.providers.errors import ProviderError
from weatherhub.providers.registry import ProviderRegistry
from weatherhub.services.weather import WeatherService


FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
US_ONLY = ProviderCapability(supports=ProviderSupport(current=True), regions=("US",))
GLOBAL = ProviderCapability(supports=ProviderSupport(current=True))


class _StubProvider:
    def __init__(self, name: str, temperature: float = 20.0, capability: ProviderCapability = GLOBAL) -> None:
        self.name = name
        self.capability = capability
        self.temperature = temperature
        self.calls = []

    def get_weather(self, latitude: float, longitude: float) -> WeatherData:
        self.calls.append((latitude, longitude))
        return WeatherData(
            temperature=Measurement(self.temperature, "C"),
            humidity=Measurement(50, "percent"),
        )


class _FailingProvider(_StubProvider):
    def __init__(self, name: str, error: Exception, capability: ProviderCapability = GLOBAL) -> None:
        super().__init__(name, capability=capability)
        self.error = error

    def get_weather(self, latitude: float, longitude: float) -> WeatherData:
        self.calls.append((latitude, longitude))
        raise self.error


class _RecordingReporter:
    def __init__(self) -> None:
        self.calls = []

    def record(self, provider_id, outcome) -> None:
        self.calls.append((provider_id, outcome))


def make_service(providers, clock=None, **kwargs) -> WeatherService:
    kwargs.setdefault("cache", WeatherCache(time_func=clock) if clock else WeatherCache())
    kwargs.setdefault("now_func", lambda: FIXED_NOW)
    return WeatherService(providers=providers, **kwargs)


def upstream(provider: str) -> ProviderError:
    return ProviderError("Request failed with status code 503", code=ProviderErrorCode.UPSTREAM, provider=provider, status=503)


def test_ineligible_region_falls_through_to_global_provider() -> None:
    nws = _StubProvider("nws", capability=US_ONLY)
    openweather = _StubProvider("openweather", temperature=12.0)
    service = make_service([nws, openweather])

    result = service.get_weather(51.5074, -0.1278)

    assert result.provider == "openweather"
    assert result.temperature.value == 12.0
    assert nws.calls == []
    assert len(openweather.calls) == 1
    health = service.registry.get_health("nws")
    assert health.success_rate == 1.0
    assert health.circuit is CircuitState.CLOSED


def test_eligible_region_uses_first_provider() -> None:
    nws = _StubProvider("nws", capability=US_ONLY)
    openweather = _StubProvider("openweather")
    service = make_service([nws, openweather])

    result = service.get_weather(40.7128, -74.0060)

    assert result.provider == "nws"
    assert openweather.calls == []


def test_cache_miss_then_hit(clock) -> None:
    provider = _StubProvider("openweather", temperature=14.2)
    service = make_service([provider], clock=clock)

    first = service.get_weather(48.8566, 2.3522)
    second = service.get_weather(48.8566, 2.3522)

    assert len(provider.calls) == 1
    assert first.cached is False
    assert first.cached_at is None
    assert second.cached is True
    assert second.cached_at == "2024-05-01T12:00:00Z"
    assert second.provider == "openweather"
    assert second.temperature == first.temperature
    assert second.humidity == first.humidity


def test_nearby_points_share_a_bucket() -> None:
    provider = _StubProvider("openweather")
    service = make_service([provider])

    service.get_weather(40.7128, -74.0060)
    service.get_weather(40.7130, -74.0062)

    assert len(provider.calls) == 1


def test_provider_receives_bucket_center() -> None:
    provider = _StubProvider("openweather")
    service = make_service([provider])

    service.get_weather(40.7128, -74.0060)

    geohash = service.bucket_key(40.7128, -74.0060)
    assert provider.calls == [bucket_center(geohash)]


def test_cache_entry_expires(clock) -> None:
    provider = _StubProvider("openweather")
    service = make_service([provider], clock=clock, cache_ttl=60)

    service.get_weather(10.0, 20.0)
    clock.advance(61)
    result = service.get_weather(10.0, 20.0)

    assert len(provider.calls) == 2
    assert result.cached is False


def test_bypass_cache_refetches_and_rewrites(clock) -> None:
    provider = _StubProvider("openweather")
    service = make_service([provider], clock=clock)

    service.get_weather(10.0, 20.0)
    fresh = service.get_weather(10.0, 20.0, bypass_cache=True)
    cached = service.get_weather(10.0, 20.0)

    assert len(provider.calls) == 2
    assert fresh.cached is False
    assert cached.cached is True


def test_cache_payload_is_json_keyed_by_geohash() -> None:
    cache = WeatherCache()
    service = make_service([_StubProvider("openweather")], cache=cache, geohash_precision=6)

    service.get_weather(40.7128, -74.0060)

    key = f"weather:{service.bucket_key(40.7128, -74.0060)}"
    payload = json.loads(cache.get(key))
    assert len(key) == len("weather:") + 6
    assert payload["provider"] == "openweather"
    assert payload["cached"] is True
    assert payload["cached_at"] == "2024-05-01T12:00:00Z"
    assert payload["temperature"] == {"value": 20.0, "unit": "C"}


def test_all_providers_fail_raises_last_error() -> None:
    first_error = upstream("nws")
    last_error = ProviderError("timed out", code=ProviderErrorCode.TIMEOUT, provider="openweather")
    nws = _FailingProvider("nws", first_error)
    openweather = _FailingProvider("openweather", last_error)
    reporter = _RecordingReporter()
    service = make_service([nws, openweather], reporter=reporter)

    with pytest.raises(ProviderError) as excinfo:
        service.get_weather(40.7128, -74.0060)

    assert excinfo.value is last_error
    assert [call[0] for call in reporter.calls] == ["nws", "openweather"]
    assert [call[1].code for call in reporter.calls] == [ProviderErrorCode.UPSTREAM, ProviderErrorCode.TIMEOUT]
    assert service.registry.get_health("nws").success_rate == pytest.approx(0.8)
    assert service.registry.get_health("openweather").success_rate == pytest.approx(0.8)


def test_failure_then_success_reports_both_attempts() -> None:
    reporter = _RecordingReporter()
    service = make_service([_FailingProvider("nws", upstream("nws")), _StubProvider("openweather")], reporter=reporter)

    result = service.get_weather(40.7128, -74.0060)

    assert result.provider == "openweather"
    assert [(pid, outcome.ok) for pid, outcome in reporter.calls] == [("nws", False), ("openweather", True)]
    assert reporter.calls[0][1].status == 503


def test_unexpected_exception_is_reported_as_unavailable() -> None:
    reporter = _RecordingReporter()
    service = make_service([_FailingProvider("nws", KeyError("properties"))], reporter=reporter)

    with pytest.raises(KeyError):
        service.get_weather(40.7128, -74.0060)

    assert reporter.calls[0][1].code is ProviderErrorCode.UNAVAILABLE


def test_only_ineligible_provider_raises_location_error() -> None:
    nws = _StubProvider("nws", capability=US_ONLY)
    service = make_service([nws])

    with pytest.raises(InvalidProviderLocationError):
        service.get_weather(51.5074, -0.1278)

    assert nws.calls == []


def test_region_without_checker_is_assumed_eligible() -> None:
    provider = _StubProvider("meteo", capability=ProviderCapability(regions=("CH",)))
    service = make_service([provider])

    assert service.get_weather(51.5074, -0.1278).provider == "meteo"


@pytest.mark.parametrize("lat, lng", [(91, 0), (0, 181), ("abc", 0), (None, None)])
def test_invalid_coordinates_rejected_before_any_work(lat, lng) -> None:
    provider = _StubProvider("openweather")
    cache = WeatherCache()
    service = make_service([provider], cache=cache)

    with pytest.raises(InvalidCoordinatesError, match="Invalid latitude or longitude"):
        service.get_weather(lat, lng)

    assert provider.calls == []
    assert len(cache) == 0


def test_open_circuits_leave_no_provider(clock) -> None:
    registry = ProviderRegistry(CircuitConfig(failure_count_to_open=1), time_func=clock)
    policy = FallbackPolicyConfig(provider_policy="priority-then-health")
    service = make_service([_FailingProvider("openweather", upstream("openweather"))], registry=registry, policy=policy)

    with pytest.raises(ProviderError):
        service.get_weather(10.0, 20.0)
    assert registry.get_health("openweather").circuit is CircuitState.OPEN

    with pytest.raises(NoProviderAvailableError):
        service.get_weather(10.0, 20.0)


def test_health_policy_routes_around_open_circuit(clock) -> None:
    registry = ProviderRegistry(CircuitConfig(failure_count_to_open=2, half_open_after_ms=30_000), time_func=clock)
    flaky = _FailingProvider("nws", upstream("nws"), capability=GLOBAL)
    backup = _StubProvider("openweather")
    policy = FallbackPolicyConfig(provider_policy="priority-then-health")
    service = make_service([flaky, backup], registry=registry, policy=policy)

    service.get_weather(10.0, 20.0, bypass_cache=True)
    service.get_weather(10.0, 20.0, bypass_cache=True)
    assert registry.get_health("nws").circuit is CircuitState.OPEN

    service.get_weather(10.0, 20.0, bypass_cache=True)

    assert len(flaky.calls) == 2
    assert len(backup.calls) == 3


def test_half_open_provider_is_tried_after_healthy_ones(clock) -> None:
    registry = ProviderRegistry(CircuitConfig(failure_count_to_open=1, half_open_after_ms=1_000), time_func=clock)
    nws = _StubProvider("nws")
    openweather = _StubProvider("openweather")
    policy = FallbackPolicyConfig(provider_policy="priority-then-health")
    service = make_service([nws, openweather], registry=registry, policy=policy)
    registry.record_outcome("nws", ProviderCallOutcome.failure(5.0, ProviderErrorCode.UPSTREAM))
    clock.advance(2)
    registry.record_outcome("nws", ProviderCallOutcome.success(5.0))
    assert registry.get_health("nws").circuit is CircuitState.HALF_OPEN

    result = service.get_weather(10.0, 20.0)

    assert result.provider == "openweather"
    assert nws.calls == []


def test_construction_validates_configuration() -> None:
    with pytest.raises(ConfigurationError):
        WeatherService(providers=[])
    with pytest.raises(ProviderNotSupportedError, match="Provider darksky is not supported yet"):
        WeatherService(providers=["darksky"])
    with pytest.raises(ConfigurationError):
        WeatherService(providers=["openweather"])
    with pytest.raises(ConfigurationError):
        WeatherService(providers=["nws"], geohash_precision=0)
    with pytest.raises(ConfigurationError):
        WeatherService(providers=["nws"], geohash_precision=20)


def test_named_providers_register_in_order() -> None:
    service = WeatherService(providers=["nws", "openweather", "tomorrow"], api_keys={"openweather": "k", "tomorrow": "t"})

    assert service.registry.list_providers() == ["nws", "openweather", "tomorrow"]
    assert [provider.name for provider in service.providers] == ["nws", "openweather", "tomorrow"]
    assert service.registry.get_capability("nws").regions == ("US",)


def test_reporter_failures_never_break_requests() -> None:
    class Exploding:
        def record(self, provider_id, outcome):
            raise RuntimeError("metrics backend down")

    service = make_service([_StubProvider("openweather")], reporter=Exploding())

    assert service.get_weather(10.0, 20.0).provider == "openweather"
    assert service.registry.get_health("openweather").p95_latency_ms is not None


def test_shared_registry_keeps_each_service_in_its_configured_order() -> None:
    registry = ProviderRegistry()
    make_service([_StubProvider("openweather"), _StubProvider("nws")], registry=registry)
    service = make_service([_StubProvider("nws"), _StubProvider("openweather")], registry=registry)

    assert registry.list_providers() == ["openweather", "nws"]
    assert service.get_weather(10.0, 20.0).provider == "nws"


def test_request_policy_overrides_service_policy() -> None:
    nws = _StubProvider("nws")
    openweather = _StubProvider("openweather")
    service = make_service([nws, openweather])
    weighted = FallbackPolicyConfig(provider_policy="weighted", provider_weights={"openweather": 5.0})

    first = service.get_weather(10.0, 20.0, policy=weighted)
    second = service.get_weather(10.0, 20.0, bypass_cache=True)

    assert first.provider == "openweather"
    assert second.provider == "nws"
    assert service.policy is None


def test_request_policy_can_skip_open_circuit(clock) -> None:
    registry = ProviderRegistry(CircuitConfig(failure_count_to_open=1), time_func=clock)
    nws = _StubProvider("nws")
    openweather = _StubProvider("openweather")
    service = make_service([nws, openweather], registry=registry)
    registry.record_outcome("nws", ProviderCallOutcome.failure(5.0, ProviderErrorCode.UPSTREAM))

    result = service.get_weather(10.0, 20.0, policy=FallbackPolicyConfig(provider_policy="priority-then-health"))

    assert result.provider == "openweather"
    assert nws.calls == []


def test_mismatched_registry_circuit_is_logged(caplog) -> None:
    registry = ProviderRegistry(CircuitConfig(failure_count_to_open=2))
    policy = FallbackPolicyConfig(circuit=CircuitConfig(failure_count_to_open=7))

    with caplog.at_level("WARNING", logger="WeatherService"):
        service = make_service([_StubProvider("openweather")], registry=registry, policy=policy)

    assert service.registry is registry
    assert registry.circuit.failure_count_to_open == 2
    assert "override the policy circuit" in caplog.text


def test_bare_string_providers_rejected() -> None:
    with pytest.raises(ConfigurationError, match="not a string"):
        WeatherService(providers="nws")


def test_decimal_coordinates_accepted() -> None:
    provider = _StubProvider("openweather")
    service = make_service([provider])

    result = service.get_weather(Decimal("40.7128"), Decimal("-74.0060"))

    assert result.provider == "openweather"
    assert service.bucket_key(Decimal("40.7128"), Decimal("-74.0060")) == service.bucket_key(40.7128, -74.0060)
