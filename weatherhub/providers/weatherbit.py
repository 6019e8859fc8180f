from __future__ import annotations

from typing import Optional

from .base import WeatherProvider
from .capabilities import ProviderCapability, ProviderSupport
from .schemas import WeatherbitCurrentResponse
from ..conditions import standardize_weatherbit
from ..entities import Measurement, Unit, WeatherData
from ..errors import ConfigurationError


class WeatherbitProvider(WeatherProvider):
    name = "weatherbit"
    capability = ProviderCapability(supports=ProviderSupport(current=True), units=("C",))
    requires_api_key = True
    base_url = "https://api.weatherbit.io/v2.0/current"

    def __init__(self, api_key: Optional[str], base_url: Optional[str] = None, **kwargs) -> None:
        if not api_key:
            raise ConfigurationError("Weatherbit provider requires an API key.")
        super().__init__(**kwargs)
        self.api_key = api_key
        self.base_url = base_url or self.base_url

    def get_weather(self, latitude: float, longitude: float) -> WeatherData:
        params = {"lat": latitude, "lon": longitude, "key": self.api_key}
        payload = self._get_model(self.base_url, WeatherbitCurrentResponse, params=params)
        current = payload.data[0]
        if current.temp is None and current.rh is None and current.dewpt is None:
            raise self._parse_error("Invalid weather data", self.base_url)

        result = {}
        if current.temp is not None:
            result["temperature"] = Measurement(current.temp, Unit.CELSIUS.value)
        if current.rh is not None:
            result["humidity"] = Measurement(current.rh, Unit.PERCENT.value)
        if current.dewpt is not None:
            result["dew_point"] = Measurement(current.dewpt, Unit.CELSIUS.value)
        if current.clouds is not None:
            result["cloudiness"] = Measurement(current.clouds, Unit.PERCENT.value)
        if current.weather is not None and current.weather.code is not None:
            result["conditions"] = Measurement(
                standardize_weatherbit(current.weather.code).value,
                Unit.STRING.value,
                original=current.weather.description or f"Code {current.weather.code}",
            )
        return WeatherData(**result)


__all__ = ["WeatherbitProvider"]
