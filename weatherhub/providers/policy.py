"""Provider selection policies.

``select_providers`` is a pure function of registry state: it never performs
I/O and never mutates the registry.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .capabilities import (
    CircuitState,
    FallbackPolicyConfig,
    Intent,
    ProviderId,
    ProviderPolicy,
)
from .registry import ProviderRegistry


logger = logging.getLogger(__name__)

CIRCUIT_OPEN = "circuit-open"
BELOW_SUCCESS_THRESHOLD = "below-success-threshold"
ABOVE_LATENCY_THRESHOLD = "above-latency-threshold"


@dataclass(frozen=True)
class SkippedProvider:
    id: ProviderId
    reason: str


@dataclass(frozen=True)
class SelectionResult:
    candidates: List[ProviderId] = field(default_factory=list)
    skipped: List[SkippedProvider] = field(default_factory=list)


def select_providers(
    registry: ProviderRegistry,
    intent: Optional[Intent] = None,
    config: Optional[FallbackPolicyConfig] = None,
) -> SelectionResult:
    config = config or FallbackPolicyConfig()
    base = registry.list_providers(intent)
    policy = _resolve_policy(config.provider_policy)

    if policy is ProviderPolicy.PRIORITY_THEN_HEALTH:
        healthy, half_open, skipped = _filter_healthy(registry, base, config)
        # half-open providers are tried only after every healthy one
        return SelectionResult(candidates=healthy + half_open, skipped=skipped)

    if policy is ProviderPolicy.WEIGHTED:
        healthy, half_open, skipped = _filter_healthy(registry, base, config)
        survivors = [provider_id for provider_id in base if provider_id in healthy or provider_id in half_open]
        weights = config.provider_weights
        ordered = sorted(survivors, key=lambda provider_id: -weights.get(provider_id, 1))
        return SelectionResult(candidates=ordered, skipped=skipped)

    return SelectionResult(candidates=list(base), skipped=[])


def _resolve_policy(value: str) -> ProviderPolicy:
    try:
        return ProviderPolicy(value)
    except ValueError:
        logger.debug("Unknown provider policy %r, using priority order", value)
        return ProviderPolicy.PRIORITY


def _filter_healthy(
    registry: ProviderRegistry,
    base: List[ProviderId],
    config: FallbackPolicyConfig,
) -> Tuple[List[ProviderId], List[ProviderId], List[SkippedProvider]]:
    thresholds = config.health_thresholds
    healthy: List[ProviderId] = []
    half_open: List[ProviderId] = []
    skipped: List[SkippedProvider] = []
    for provider_id in base:
        health = registry.get_health(provider_id)
        if health is None:
            continue
        if health.circuit is CircuitState.OPEN:
            skipped.append(SkippedProvider(provider_id, CIRCUIT_OPEN))
            continue
        if thresholds.min_success_rate is not None and health.success_rate < thresholds.min_success_rate:
            skipped.append(SkippedProvider(provider_id, BELOW_SUCCESS_THRESHOLD))
            continue
        if (
            thresholds.max_p95_ms is not None
            and health.p95_latency_ms is not None
            and health.p95_latency_ms > thresholds.max_p95_ms
        ):
            skipped.append(SkippedProvider(provider_id, ABOVE_LATENCY_THRESHOLD))
            continue
        if health.circuit is CircuitState.HALF_OPEN:
            half_open.append(provider_id)
        else:
            healthy.append(provider_id)
    return healthy, half_open, skipped


__all__ = [
    "ABOVE_LATENCY_THRESHOLD",
    "BELOW_SUCCESS_THRESHOLD",
    "CIRCUIT_OPEN",
    "SelectionResult",
    "SkippedProvider",
    "select_providers",
]
