"""Multi-provider weather orchestration.

A request is answered from the cache when possible; otherwise the candidate
providers are tried one after another until one of them succeeds. Every
attempt is reported to the registry (and any extra reporter) so that the
health-aware policies can steer later requests away from failing providers.
"""
from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import requests

from ..cache import DEFAULT_TTL, CacheBackend, WeatherCache
from ..entities import WeatherData
from ..errors import (
    ConfigurationError,
    InvalidProviderLocationError,
    NoProviderAvailableError,
)
from ..geo import DEFAULT_PRECISION, bucket_center, bucket_key, is_valid_precision, validate_coordinates
from ..providers.base import RequestConfig
from ..providers.capabilities import (
    FallbackPolicyConfig,
    Intent,
    ProviderCallOutcome,
    ProviderCapability,
    ProviderId,
)
from ..providers.factory import create_provider
from ..providers.policy import select_providers
from ..providers.registry import ProviderRegistry
from ..providers.reporting import (
    CompositeOutcomeReporter,
    OutcomeReporter,
    get_default_reporter,
    outcome_from_error,
)
from ..regions import RegionEligibility, default_regions


CACHE_PREFIX = "weather"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WeatherService:
    def __init__(
        self,
        *,
        providers: Iterable[Union[str, Any]] = ("nws",),
        api_keys: Optional[Mapping[str, str]] = None,
        cache: Optional[CacheBackend] = None,
        geohash_precision: Optional[int] = None,
        cache_ttl: Optional[int] = None,
        policy: Optional[FallbackPolicyConfig] = None,
        registry: Optional[ProviderRegistry] = None,
        reporter: Optional[OutcomeReporter] = None,
        eligibility: Optional[Mapping[str, RegionEligibility]] = None,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
        user_agent: Optional[str] = None,
        now_func: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._log = logger or logging.getLogger(self.__class__.__name__)
        if geohash_precision is None:
            geohash_precision = DEFAULT_PRECISION
        elif not is_valid_precision(geohash_precision):
            raise ConfigurationError("Geohash precision must be an integer between 1 and 19")
        self.geohash_precision = geohash_precision
        self.cache_ttl = DEFAULT_TTL if cache_ttl is None else cache_ttl
        self.cache = cache if cache is not None else WeatherCache()
        self.policy = policy
        self.eligibility: Dict[str, RegionEligibility] = (
            dict(eligibility) if eligibility is not None else default_regions()
        )
        self._now = now_func or _utc_now

        if isinstance(providers, str):
            raise ConfigurationError("providers must be a sequence of provider names or clients, not a string")
        api_keys = api_keys or {}
        self._clients: Dict[ProviderId, Any] = {}
        for entry in providers:
            if isinstance(entry, str):
                client = create_provider(
                    entry,
                    api_keys.get(entry),
                    session=session,
                    request_config=request_config,
                    user_agent=user_agent,
                )
            else:
                client = entry
            self._clients[client.name] = client
        if not self._clients:
            raise ConfigurationError("At least one weather provider must be configured")

        if registry is None:
            registry = ProviderRegistry(circuit=policy.circuit if policy else None)
        elif policy is not None and registry.circuit != policy.circuit:
            self._log.warning(
                "Shared registry circuit settings %s override the policy circuit %s",
                registry.circuit,
                policy.circuit,
            )
        self._registry = registry
        for provider_id, client in self._clients.items():
            self._registry.register(provider_id, _capability_of(client))
        extra = reporter if reporter is not None else get_default_reporter()
        self._reporter = CompositeOutcomeReporter(self._registry, extra)

    # Public API ---------------------------------------------------------
    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def providers(self) -> Tuple[Any, ...]:
        return tuple(self._clients.values())

    def bucket_key(self, latitude: float, longitude: float) -> str:
        lat, lng = validate_coordinates(latitude, longitude)
        return bucket_key(lat, lng, self.geohash_precision)

    def get_weather(
        self,
        latitude: float,
        longitude: float,
        *,
        bypass_cache: bool = False,
        intent: Optional[Intent] = None,
        policy: Optional[FallbackPolicyConfig] = None,
    ) -> WeatherData:
        """Return current weather for a point, from the cache or the first provider that answers.

        ``policy`` replaces the service policy for this call only. Its
        ``circuit`` section is ignored: breaker settings belong to the registry.
        """
        geohash = self.bucket_key(latitude, longitude)
        cache_key = f"{CACHE_PREFIX}:{geohash}"

        if not bypass_cache:
            cached = self._read_cache(cache_key)
            if cached is not None:
                self._log.debug("Cache hit for %s", cache_key)
                return cached
        self._log.debug("Cache miss for %s", cache_key)

        center_lat, center_lng = bucket_center(geohash)
        candidates = self._candidates(intent or Intent.current_only(), policy or self.policy)
        if not candidates:
            raise NoProviderAvailableError("No weather provider available for this request")

        last_error: Optional[BaseException] = None
        for provider_id in candidates:
            client = self._clients[provider_id]
            try:
                self._check_location(provider_id, center_lat, center_lng)
            except InvalidProviderLocationError as exc:
                self._log.warning("Skipping %s: %s", provider_id, exc)
                last_error = exc
                continue

            started = time.perf_counter()
            try:
                data = client.get_weather(center_lat, center_lng)
            except Exception as exc:  # noqa: BLE001 - try the next candidate
                latency_ms = (time.perf_counter() - started) * 1000
                self._log.warning("Provider %s failed, trying next: %r", provider_id, exc)
                self._reporter.record(provider_id, outcome_from_error(exc, latency_ms))
                last_error = exc
                continue

            latency_ms = (time.perf_counter() - started) * 1000
            self._reporter.record(provider_id, ProviderCallOutcome.success(latency_ms))
            result = data.tagged(provider_id)
            self._write_cache(cache_key, result)
            self._log.info("Weather for %s served by %s in %.0f ms", geohash, provider_id, latency_ms)
            return result

        if last_error is None:  # pragma: no cover - candidates is never empty here
            raise NoProviderAvailableError("No weather provider available for this request")
        raise last_error

    # Helpers ------------------------------------------------------------
    def _candidates(self, intent: Intent, policy: Optional[FallbackPolicyConfig]) -> List[ProviderId]:
        if policy is None:
            # configured order, not registration order
            ordered = []
            for provider_id in self._clients:
                capability = self._registry.get_capability(provider_id)
                if capability is not None and intent.is_satisfied_by(capability.supports):
                    ordered.append(provider_id)
        else:
            selection = select_providers(self._registry, intent, policy)
            for skipped in selection.skipped:
                self._log.debug("Policy skipped %s: %s", skipped.id, skipped.reason)
            ordered = selection.candidates
        return [provider_id for provider_id in ordered if provider_id in self._clients]

    def _check_location(self, provider_id: ProviderId, latitude: float, longitude: float) -> None:
        capability = self._registry.get_capability(provider_id)
        if capability is None:
            return
        for region in capability.regions:
            checker = self.eligibility.get(region)
            if checker is None:
                self._log.debug("No eligibility check for region %s, assuming %s is eligible", region, provider_id)
                continue
            if not checker.is_eligible(latitude, longitude):
                raise InvalidProviderLocationError(
                    f"{provider_id} provider does not support the provided location"
                )

    def _read_cache(self, key: str) -> Optional[WeatherData]:
        raw = self.cache.get(key)
        if raw is None:
            return None
        try:
            return WeatherData.from_dict(json.loads(raw))
        except (TypeError, ValueError) as exc:
            self._log.warning("Discarding unreadable cache entry %s: %s", key, exc)
            return None

    def _write_cache(self, key: str, result: WeatherData) -> None:
        cached_at = self._now().astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
        payload = result.mark_cached(cached_at).as_dict()
        self.cache.set(key, json.dumps(payload), self.cache_ttl)


def _capability_of(client: Any) -> ProviderCapability:
    capability = getattr(client, "capability", None)
    return capability if isinstance(capability, ProviderCapability) else ProviderCapability()


__all__ = ["CACHE_PREFIX", "WeatherService"]
