from __future__ import annotations

from typing import Iterable, Optional

from .base import WeatherProvider
from .capabilities import ProviderCapability, ProviderSupport
from .schemas import NwsCloudLayer, NwsObservationResponse, NwsPointResponse, NwsStationsResponse
from ..conditions import standardize_nws
from ..entities import Measurement, Unit, WeatherData


DEFAULT_USER_AGENT = "(weatherhub, ops@example.com)"

CLOUD_COVER = {
    "CLR": 0,
    "SKC": 0,
    "FEW": 20,
    "SCT": 40,
    "BKN": 75,
    "OVC": 100,
    "VV": 100,
}


def cloudiness_from_layers(layers: Iterable[NwsCloudLayer]) -> Optional[int]:
    """Average the METAR cloud-layer amounts into a cover percentage."""
    values = [CLOUD_COVER[layer.amount] for layer in layers if layer.amount in CLOUD_COVER]
    if not values:
        return None
    return round(sum(values) / len(values))


class NwsProvider(WeatherProvider):
    """National Weather Service observations (United States only, no key)."""

    name = "nws"
    capability = ProviderCapability(
        supports=ProviderSupport(current=True),
        regions=("US",),
        units=("C", "F"),
        locales=("en-US",),
    )
    base_url = "https://api.weather.gov"

    def __init__(self, user_agent: Optional[str] = None, base_url: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url or self.base_url
        self.session.headers.update(
            {
                "User-Agent": user_agent or DEFAULT_USER_AGENT,
                "Accept": "application/geo+json",
            }
        )

    def get_weather(self, latitude: float, longitude: float) -> WeatherData:
        stations_url = self.observation_stations_url(latitude, longitude)
        station_id = self.nearest_station(stations_url)
        observation = self.latest_observation(station_id)
        return self._convert(observation)

    def observation_stations_url(self, latitude: float, longitude: float) -> str:
        url = f"{self.base_url}/points/{latitude},{longitude}"
        point = self._get_model(url, NwsPointResponse)
        return point.properties.observation_stations

    def nearest_station(self, stations_url: str) -> str:
        stations = self._get_model(stations_url, NwsStationsResponse)
        return stations.features[0].id

    def latest_observation(self, station_id: str) -> NwsObservationResponse:
        return self._get_model(f"{station_id}/observations/latest", NwsObservationResponse)

    def _convert(self, observation: NwsObservationResponse) -> WeatherData:
        props = observation.properties
        temperature = dew_point = humidity = conditions = cloudiness = None
        if props.temperature.value is not None:
            temperature = Measurement(props.temperature.value, _temperature_unit(props.temperature.unit_code))
        if props.dewpoint.value is not None:
            dew_point = Measurement(props.dewpoint.value, _temperature_unit(props.dewpoint.unit_code))
        if props.relative_humidity.value is not None:
            humidity = Measurement(props.relative_humidity.value, Unit.PERCENT.value)
        if props.text_description:
            conditions = Measurement(
                standardize_nws(props.text_description).value,
                Unit.STRING.value,
                original=props.text_description,
            )
        cover = cloudiness_from_layers(props.cloud_layers)
        if cover is not None:
            cloudiness = Measurement(cover, Unit.PERCENT.value)
        if temperature is None and humidity is None and dew_point is None:
            raise self._parse_error("Invalid observation data")
        return WeatherData(
            temperature=temperature,
            humidity=humidity,
            dew_point=dew_point,
            conditions=conditions,
            cloudiness=cloudiness,
        )


def _temperature_unit(unit_code: Optional[str]) -> str:
    return Unit.CELSIUS.value if unit_code == "wmoUnit:degC" else Unit.FAHRENHEIT.value


__all__ = ["CLOUD_COVER", "NwsProvider", "cloudiness_from_layers"]
