"""Provider descriptors, health state and fallback policy configuration."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple


ProviderId = str


class ProviderErrorCode(str, Enum):
    NETWORK = "NetworkError"
    TIMEOUT = "TimeoutError"
    RATE_LIMIT = "RateLimitError"
    NOT_FOUND = "NotFoundError"
    VALIDATION = "ValidationError"
    PARSE = "ParseError"
    UPSTREAM = "UpstreamError"
    UNAVAILABLE = "UnavailableError"


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half-open"


class ProviderPolicy(str, Enum):
    PRIORITY = "priority"
    PRIORITY_THEN_HEALTH = "priority-then-health"
    WEIGHTED = "weighted"


@dataclass(frozen=True)
class ProviderSupport:
    current: bool = True
    hourly: bool = False
    daily: bool = False
    alerts: bool = False


@dataclass(frozen=True)
class Intent:
    """Data kinds a caller needs; every flag set here must be supported."""

    current: bool = False
    hourly: bool = False
    daily: bool = False
    alerts: bool = False

    @classmethod
    def current_only(cls) -> "Intent":
        return cls(current=True)

    def is_satisfied_by(self, supports: ProviderSupport) -> bool:
        if self.current and not supports.current:
            return False
        if self.hourly and not supports.hourly:
            return False
        if self.daily and not supports.daily:
            return False
        if self.alerts and not supports.alerts:
            return False
        return True


@dataclass(frozen=True)
class ProviderCapability:
    supports: ProviderSupport = field(default_factory=ProviderSupport)
    regions: Tuple[str, ...] = ()
    units: Tuple[str, ...] = ()
    locales: Tuple[str, ...] = ()

    @property
    def is_region_restricted(self) -> bool:
        return bool(self.regions)


@dataclass
class ProviderHealthSnapshot:
    success_rate: float = 1.0
    circuit: CircuitState = CircuitState.CLOSED
    last_failure_at: Optional[float] = None
    p95_latency_ms: Optional[float] = None

    def as_dict(self) -> dict:
        return {
            "success_rate": round(self.success_rate, 4),
            "circuit": self.circuit.value,
            "last_failure_at": self.last_failure_at,
            "p95_latency_ms": self.p95_latency_ms,
        }


@dataclass(frozen=True)
class ProviderCallOutcome:
    """Result of a single provider invocation, as fed to outcome reporters."""

    ok: bool
    latency_ms: float
    code: Optional[ProviderErrorCode] = None
    status: Optional[int] = None
    retry_after_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.ok and self.code is None:
            raise ValueError("failed outcomes require an error code")

    @classmethod
    def success(cls, latency_ms: float) -> "ProviderCallOutcome":
        return cls(ok=True, latency_ms=latency_ms)

    @classmethod
    def failure(
        cls,
        latency_ms: float,
        code: ProviderErrorCode,
        status: Optional[int] = None,
        retry_after_ms: Optional[int] = None,
    ) -> "ProviderCallOutcome":
        return cls(
            ok=False,
            latency_ms=latency_ms,
            code=code,
            status=status,
            retry_after_ms=retry_after_ms,
        )


@dataclass(frozen=True)
class HealthThresholds:
    min_success_rate: Optional[float] = None
    max_p95_ms: Optional[float] = None


@dataclass(frozen=True)
class CircuitConfig:
    failure_count_to_open: int = 5
    half_open_after_ms: int = 30_000
    success_to_close: int = 1


@dataclass(frozen=True)
class FallbackPolicyConfig:
    provider_policy: str = ProviderPolicy.PRIORITY.value
    provider_weights: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    health_thresholds: HealthThresholds = field(default_factory=HealthThresholds)
    circuit: CircuitConfig = field(default_factory=CircuitConfig)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FallbackPolicyConfig":
        """Build a config from plain settings values.

        Accepts the keys ``provider_policy``, ``provider_weights``,
        ``health_thresholds`` and ``circuit``; missing keys keep defaults.
        """
        if not data:
            return cls()
        thresholds = data.get("health_thresholds") or {}
        circuit = data.get("circuit") or {}
        return cls(
            provider_policy=str(data.get("provider_policy") or ProviderPolicy.PRIORITY.value),
            provider_weights=MappingProxyType(
                {str(k): float(v) for k, v in (data.get("provider_weights") or {}).items()}
            ),
            health_thresholds=HealthThresholds(
                min_success_rate=_optional_float(thresholds.get("min_success_rate")),
                max_p95_ms=_optional_float(thresholds.get("max_p95_ms")),
            ),
            circuit=CircuitConfig(**{k: int(v) for k, v in circuit.items()}),
        )


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


__all__ = [
    "CircuitConfig",
    "CircuitState",
    "FallbackPolicyConfig",
    "HealthThresholds",
    "Intent",
    "ProviderCallOutcome",
    "ProviderCapability",
    "ProviderErrorCode",
    "ProviderHealthSnapshot",
    "ProviderId",
    "ProviderPolicy",
    "ProviderSupport",
]
