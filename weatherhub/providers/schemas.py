"""Upstream payload schemas.

Only the fields the clients read are declared; everything else in the
provider responses is ignored.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# -- National Weather Service ------------------------------------------------
class NwsPointProperties(_Payload):
    observation_stations: str = Field(..., alias="observationStations")


class NwsPointResponse(_Payload):
    properties: NwsPointProperties


class NwsStationFeature(_Payload):
    id: str


class NwsStationsResponse(_Payload):
    features: List[NwsStationFeature] = Field(..., min_length=1)


class NwsQuantity(_Payload):
    value: Optional[float] = None
    unit_code: Optional[str] = Field(default=None, alias="unitCode")


class NwsCloudLayer(_Payload):
    amount: Optional[str] = None


class NwsObservationProperties(_Payload):
    temperature: NwsQuantity = Field(default_factory=NwsQuantity)
    dewpoint: NwsQuantity = Field(default_factory=NwsQuantity)
    relative_humidity: NwsQuantity = Field(default_factory=NwsQuantity, alias="relativeHumidity")
    text_description: Optional[str] = Field(default=None, alias="textDescription")
    cloud_layers: List[NwsCloudLayer] = Field(default_factory=list, alias="cloudLayers")


class NwsObservationResponse(_Payload):
    properties: NwsObservationProperties


# -- OpenWeather -------------------------------------------------------------
class OpenWeatherCondition(_Payload):
    id: Optional[int] = None
    main: Optional[str] = None
    description: Optional[str] = None


class OpenWeatherCurrent(_Payload):
    temp: Optional[float] = None
    humidity: Optional[float] = None
    dew_point: Optional[float] = None
    clouds: Optional[float] = None
    sunrise: Optional[int] = None
    sunset: Optional[int] = None
    weather: List[OpenWeatherCondition] = Field(default_factory=list)


class OpenWeatherResponse(_Payload):
    current: OpenWeatherCurrent


# -- Tomorrow.io -------------------------------------------------------------
class TomorrowValues(_Payload):
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    dew_point: Optional[float] = Field(default=None, alias="dewPoint")
    cloud_cover: Optional[float] = Field(default=None, alias="cloudCover")
    weather_code: Optional[int] = Field(default=None, alias="weatherCode")


class TomorrowData(_Payload):
    time: Optional[str] = None
    values: TomorrowValues


class TomorrowRealtimeResponse(_Payload):
    data: TomorrowData


# -- Weatherbit --------------------------------------------------------------
class WeatherbitWeather(_Payload):
    code: Optional[int] = None
    description: Optional[str] = None


class WeatherbitObservation(_Payload):
    temp: Optional[float] = None
    rh: Optional[float] = None
    dewpt: Optional[float] = None
    clouds: Optional[float] = None
    weather: Optional[WeatherbitWeather] = None


class WeatherbitCurrentResponse(_Payload):
    data: List[WeatherbitObservation] = Field(..., min_length=1)


__all__ = [
    "NwsObservationResponse",
    "NwsPointResponse",
    "NwsStationsResponse",
    "OpenWeatherResponse",
    "TomorrowRealtimeResponse",
    "WeatherbitCurrentResponse",
]
