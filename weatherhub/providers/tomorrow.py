from __future__ import annotations

from typing import Optional

from .base import WeatherProvider
from .capabilities import ProviderCapability, ProviderSupport
from .schemas import TomorrowRealtimeResponse
from ..conditions import standardize_tomorrow
from ..entities import Measurement, Unit, WeatherData
from ..errors import ConfigurationError


class TomorrowProvider(WeatherProvider):
    """Tomorrow.io realtime conditions."""

    name = "tomorrow"
    capability = ProviderCapability(supports=ProviderSupport(current=True), units=("C",))
    requires_api_key = True
    base_url = "https://api.tomorrow.io/v4/weather/realtime"

    def __init__(self, api_key: Optional[str], base_url: Optional[str] = None, **kwargs) -> None:
        if not api_key:
            raise ConfigurationError("Tomorrow.io provider requires an API key.")
        super().__init__(**kwargs)
        self.api_key = api_key
        self.base_url = base_url or self.base_url

    def get_weather(self, latitude: float, longitude: float) -> WeatherData:
        params = {"location": f"{latitude},{longitude}", "apikey": self.api_key, "units": "metric"}
        payload = self._get_model(self.base_url, TomorrowRealtimeResponse, params=params)
        values = payload.data.values
        if values.temperature is None and values.humidity is None and values.dew_point is None:
            raise self._parse_error("Invalid weather data", self.base_url)

        result = {}
        if values.temperature is not None:
            result["temperature"] = Measurement(values.temperature, Unit.CELSIUS.value)
        if values.humidity is not None:
            result["humidity"] = Measurement(values.humidity, Unit.PERCENT.value)
        if values.dew_point is not None:
            result["dew_point"] = Measurement(values.dew_point, Unit.CELSIUS.value)
        if values.cloud_cover is not None:
            result["cloudiness"] = Measurement(values.cloud_cover, Unit.PERCENT.value)
        if values.weather_code is not None:
            result["conditions"] = Measurement(
                standardize_tomorrow(values.weather_code).value,
                Unit.STRING.value,
                original=f"Code {values.weather_code}",
            )
        return WeatherData(**result)


__all__ = ["TomorrowProvider"]
