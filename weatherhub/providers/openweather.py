from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .base import WeatherProvider
from .capabilities import ProviderCapability, ProviderSupport
from .schemas import OpenWeatherResponse
from ..conditions import standardize_openweather
from ..entities import Measurement, Unit, WeatherData
from ..errors import ConfigurationError


class OpenWeatherProvider(WeatherProvider):
    name = "openweather"
    capability = ProviderCapability(supports=ProviderSupport(current=True), units=("C",))
    requires_api_key = True
    base_url = "https://api.openweathermap.org/data/3.0/onecall"

    def __init__(self, api_key: Optional[str], base_url: Optional[str] = None, **kwargs) -> None:
        if not api_key:
            raise ConfigurationError("OpenWeather provider requires an API key.")
        super().__init__(**kwargs)
        self.api_key = api_key
        self.base_url = base_url or self.base_url

    def get_weather(self, latitude: float, longitude: float) -> WeatherData:
        params = {
            "lat": latitude,
            "lon": longitude,
            "appid": self.api_key,
            "units": "metric",
        }
        payload = self._get_model(self.base_url, OpenWeatherResponse, params=params)
        current = payload.current
        if current.temp is None and current.humidity is None and current.dew_point is None:
            raise self._parse_error("Invalid weather data", self.base_url)

        conditions = None
        if current.weather:
            weather = current.weather[0]
            conditions = Measurement(
                standardize_openweather(weather.id).value,
                Unit.STRING.value,
                original=weather.description,
            )
        return WeatherData(
            temperature=_celsius(current.temp),
            humidity=_percent(current.humidity),
            dew_point=_celsius(current.dew_point),
            conditions=conditions,
            cloudiness=_percent(current.clouds),
            sunrise=_timestamp(current.sunrise),
            sunset=_timestamp(current.sunset),
        )


def _celsius(value: Optional[float]) -> Optional[Measurement]:
    return Measurement(value, Unit.CELSIUS.value) if value is not None else None


def _percent(value: Optional[float]) -> Optional[Measurement]:
    return Measurement(value, Unit.PERCENT.value) if value is not None else None


def _timestamp(value: Optional[int]) -> Optional[Measurement]:
    if value is None:
        return None
    moment = datetime.fromtimestamp(value, tz=timezone.utc)
    return Measurement(moment.isoformat().replace("+00:00", "Z"), Unit.ISO8601.value)


__all__ = ["OpenWeatherProvider"]
