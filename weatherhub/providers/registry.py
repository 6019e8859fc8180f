"""Provider catalog with live health and circuit-breaker state.

Circuit transitions happen only inside :meth:`ProviderRegistry.record_outcome`;
time-based promotion from ``open`` to ``half-open`` is evaluated lazily on the
next recorded outcome, using the injected ``time_func``.
"""
from __future__ import annotations

import logging
import math
import time
from collections import deque
from dataclasses import dataclass, field, replace
from threading import Lock
from typing import Callable, Deque, Dict, List, Optional

from .capabilities import (
    CircuitConfig,
    CircuitState,
    Intent,
    ProviderCallOutcome,
    ProviderCapability,
    ProviderHealthSnapshot,
    ProviderId,
)


logger = logging.getLogger(__name__)

EMA_ALPHA = 0.2
LATENCY_WINDOW = 100


@dataclass
class _ProviderState:
    capability: ProviderCapability
    health: ProviderHealthSnapshot = field(default_factory=ProviderHealthSnapshot)
    consecutive_failures: int = 0
    consecutive_successes: int = 0
    opened_at: Optional[float] = None
    latencies: Deque[float] = field(default_factory=lambda: deque(maxlen=LATENCY_WINDOW))


class ProviderRegistry:
    def __init__(
        self,
        circuit: Optional[CircuitConfig] = None,
        time_func: Callable[[], float] = time.time,
    ) -> None:
        self.circuit = circuit or CircuitConfig()
        self._time_func = time_func
        self._providers: Dict[ProviderId, _ProviderState] = {}
        self._lock = Lock()

    # -- Catalog --------------------------------------------------------------
    def register(self, provider_id: ProviderId, capability: ProviderCapability) -> None:
        with self._lock:
            if provider_id in self._providers:
                return
            self._providers[provider_id] = _ProviderState(capability=capability)

    def get_capability(self, provider_id: ProviderId) -> Optional[ProviderCapability]:
        state = self._providers.get(provider_id)
        return state.capability if state else None

    def get_health(self, provider_id: ProviderId) -> Optional[ProviderHealthSnapshot]:
        with self._lock:
            state = self._providers.get(provider_id)
            return replace(state.health) if state else None

    def list_providers(self, intent: Optional[Intent] = None) -> List[ProviderId]:
        intent = intent or Intent()
        with self._lock:
            return [
                provider_id
                for provider_id, state in self._providers.items()
                if intent.is_satisfied_by(state.capability.supports)
            ]

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    # -- Health ---------------------------------------------------------------
    def record_outcome(self, provider_id: ProviderId, outcome: ProviderCallOutcome) -> None:
        with self._lock:
            state = self._providers.get(provider_id)
            if state is None:
                return
            now = self._time_func()
            health = state.health
            state.latencies.append(float(outcome.latency_ms))
            health.p95_latency_ms = _p95(state.latencies)

            if outcome.ok:
                state.consecutive_successes += 1
                state.consecutive_failures = 0
                health.success_rate = _ema(health.success_rate, 1.0)
                if (
                    health.circuit is CircuitState.HALF_OPEN
                    and state.consecutive_successes >= self.circuit.success_to_close
                ):
                    self._transition(provider_id, health, CircuitState.CLOSED)
            else:
                state.consecutive_failures += 1
                state.consecutive_successes = 0
                health.success_rate = _ema(health.success_rate, 0.0)
                health.last_failure_at = now
                if state.consecutive_failures >= self.circuit.failure_count_to_open:
                    self._transition(provider_id, health, CircuitState.OPEN)
                    state.opened_at = now

            if (
                health.circuit is CircuitState.OPEN
                and state.opened_at is not None
                and (now - state.opened_at) * 1000 >= self.circuit.half_open_after_ms
            ):
                self._transition(provider_id, health, CircuitState.HALF_OPEN)
                state.consecutive_failures = 0
                state.consecutive_successes = 0

    record = record_outcome

    def snapshot(self) -> Dict[ProviderId, dict]:
        with self._lock:
            return {provider_id: state.health.as_dict() for provider_id, state in self._providers.items()}

    @staticmethod
    def _transition(provider_id: ProviderId, health: ProviderHealthSnapshot, target: CircuitState) -> None:
        if health.circuit is not target:
            logger.warning("Provider %s circuit %s -> %s", provider_id, health.circuit.value, target.value)
        health.circuit = target


def _ema(previous: float, sample: float, alpha: float = EMA_ALPHA) -> float:
    return previous * (1 - alpha) + sample * alpha


def _p95(samples: Deque[float]) -> Optional[float]:
    if not samples:
        return None
    ordered = sorted(samples)
    rank = max(1, math.ceil(0.95 * len(ordered)))
    return ordered[rank - 1]


__all__ = ["EMA_ALPHA", "ProviderRegistry"]
