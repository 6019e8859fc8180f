from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Optional, Union


class Unit(str, Enum):
    CELSIUS = "C"
    FAHRENHEIT = "F"
    PERCENT = "percent"
    STRING = "string"
    ISO8601 = "iso8601"


@dataclass(frozen=True)
class Measurement:
    """A single normalized value together with its unit.

    ``original`` is only populated for conditions and keeps the provider's
    own wording next to the standardized value.
    """

    value: Union[float, str]
    unit: str
    original: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"value": self.value, "unit": _unit_value(self.unit)}
        if self.original is not None:
            payload["original"] = self.original
        return payload


_MEASUREMENT_FIELDS = (
    "temperature",
    "humidity",
    "dew_point",
    "conditions",
    "cloudiness",
    "sunrise",
    "sunset",
)


@dataclass(frozen=True)
class WeatherData:
    """Normalized current-weather record.

    Provider clients fill in whichever measurements they support and leave
    the bookkeeping fields alone; the weather service sets ``provider``,
    ``cached`` and ``cached_at``.
    """

    temperature: Optional[Measurement] = None
    humidity: Optional[Measurement] = None
    dew_point: Optional[Measurement] = None
    conditions: Optional[Measurement] = None
    cloudiness: Optional[Measurement] = None
    sunrise: Optional[Measurement] = None
    sunset: Optional[Measurement] = None
    provider: Optional[str] = None
    cached: bool = False
    cached_at: Optional[str] = None

    def tagged(self, provider: str) -> "WeatherData":
        return replace(self, provider=provider, cached=False, cached_at=None)

    def mark_cached(self, cached_at: str) -> "WeatherData":
        return replace(self, cached=True, cached_at=cached_at)

    def measurements(self) -> Dict[str, Measurement]:
        return {
            name: getattr(self, name)
            for name in _MEASUREMENT_FIELDS
            if getattr(self, name) is not None
        }

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            name: measurement.as_dict() for name, measurement in self.measurements().items()
        }
        payload["provider"] = self.provider
        payload["cached"] = self.cached
        payload["cached_at"] = self.cached_at
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "WeatherData":
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for name, raw in payload.items():
            if name not in known:
                continue
            if name in _MEASUREMENT_FIELDS:
                if raw is not None:
                    values[name] = Measurement(**raw)
            else:
                values[name] = raw
        return cls(**values)


def _unit_value(unit: Union[Unit, str]) -> str:
    return unit.value if isinstance(unit, Unit) else unit


__all__ = ["Measurement", "Unit", "WeatherData"]
