"""Standard weather conditions and per-provider lookups."""
from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Dict, Optional


logger = logging.getLogger(__name__)


class StandardWeatherCondition(str, Enum):
    BLIZZARD = "Blizzard"
    BREEZY = "Breezy"
    CLEAR = "Clear"
    CLOUDY = "Cloudy"
    COLD = "Cold"
    DRIZZLE = "Drizzle"
    DUST = "Dust"
    FLURRIES = "Flurries"
    FOG = "Fog"
    FREEZING_DRIZZLE = "Freezing Drizzle"
    FREEZING_RAIN = "Freezing Rain"
    HAIL = "Hail"
    HAZE = "Haze"
    HEAVY_RAIN = "Heavy Rain"
    HEAVY_SNOW = "Heavy Snow"
    HOT = "Hot"
    HURRICANE = "Hurricane"
    LIGHT_RAIN = "Light Rain"
    LIGHT_SNOW = "Light Snow"
    MIST = "Mist"
    MIXED = "Mixed"
    MOSTLY_CLEAR = "Mostly Clear"
    MOSTLY_CLOUDY = "Mostly Cloudy"
    OVERCAST = "Overcast"
    PARTLY_CLOUDY = "Partly Cloudy"
    RAIN = "Rain"
    SHOWERS = "Showers"
    SLEET = "Sleet"
    SMOKE = "Smoke"
    SNOW = "Snow"
    THUNDERSTORMS = "Thunderstorms"
    TORNADO = "Tornado"
    TROPICAL_STORM = "Tropical Storm"
    WINDY = "Windy"
    UNKNOWN = "Unknown"


C = StandardWeatherCondition

NWS_TEXT: Dict[str, StandardWeatherCondition] = {
    "Clear": C.CLEAR,
    "Sunny": C.CLEAR,
    "Mostly Clear": C.MOSTLY_CLEAR,
    "Mostly Sunny": C.MOSTLY_CLEAR,
    "Partly Cloudy": C.PARTLY_CLOUDY,
    "Partly Sunny": C.PARTLY_CLOUDY,
    "Mostly Cloudy": C.MOSTLY_CLOUDY,
    "Cloudy": C.CLOUDY,
    "Overcast": C.OVERCAST,
    "Light Rain": C.LIGHT_RAIN,
    "Rain": C.RAIN,
    "Heavy Rain": C.HEAVY_RAIN,
    "Light Snow": C.LIGHT_SNOW,
    "Snow": C.SNOW,
    "Heavy Snow": C.HEAVY_SNOW,
    "Fog": C.FOG,
    "Haze": C.HAZE,
    "Mist": C.MIST,
    "Smoke": C.SMOKE,
    "Thunderstorm": C.THUNDERSTORMS,
    "Thunderstorms": C.THUNDERSTORMS,
    "Windy": C.WINDY,
    "Breezy": C.BREEZY,
    "Sleet": C.SLEET,
    "Freezing Rain": C.FREEZING_RAIN,
    "Hail": C.HAIL,
    "Rain/Snow": C.MIXED,
    "Mixed Precipitation": C.MIXED,
    "Tornado": C.TORNADO,
    "Hurricane": C.HURRICANE,
    "Tropical Storm": C.TROPICAL_STORM,
}

OPENWEATHER_IDS: Dict[int, StandardWeatherCondition] = {
    300: C.DRIZZLE, 301: C.DRIZZLE, 302: C.DRIZZLE, 310: C.DRIZZLE, 311: C.DRIZZLE, 312: C.DRIZZLE,
    313: C.SHOWERS, 314: C.SHOWERS, 321: C.SHOWERS,
    500: C.LIGHT_RAIN, 501: C.RAIN, 502: C.HEAVY_RAIN, 503: C.HEAVY_RAIN, 504: C.HEAVY_RAIN,
    511: C.FREEZING_RAIN, 520: C.SHOWERS, 521: C.SHOWERS, 522: C.SHOWERS, 531: C.SHOWERS,
    600: C.LIGHT_SNOW, 601: C.SNOW, 602: C.HEAVY_SNOW, 611: C.SLEET, 612: C.SLEET, 613: C.SLEET,
    615: C.MIXED, 616: C.MIXED, 620: C.LIGHT_SNOW, 621: C.SNOW, 622: C.HEAVY_SNOW,
    701: C.MIST, 711: C.SMOKE, 721: C.HAZE, 731: C.DUST, 741: C.FOG, 751: C.DUST, 761: C.DUST,
    762: C.SMOKE, 771: C.WINDY, 781: C.TORNADO,
    800: C.CLEAR, 801: C.PARTLY_CLOUDY, 802: C.CLOUDY, 803: C.MOSTLY_CLOUDY, 804: C.OVERCAST,
}

TOMORROW_CODES: Dict[int, StandardWeatherCondition] = {
    1000: C.CLEAR, 1001: C.CLOUDY, 1100: C.MOSTLY_CLEAR, 1101: C.PARTLY_CLOUDY, 1102: C.MOSTLY_CLOUDY,
    2000: C.FOG, 2100: C.MIST, 3000: C.BREEZY, 3001: C.WINDY, 3002: C.WINDY,
    4000: C.DRIZZLE, 4001: C.RAIN, 4200: C.LIGHT_RAIN, 4201: C.HEAVY_RAIN,
    5000: C.SNOW, 5001: C.FLURRIES, 5100: C.LIGHT_SNOW, 5101: C.HEAVY_SNOW,
    6000: C.FREEZING_DRIZZLE, 6001: C.FREEZING_RAIN, 6200: C.FREEZING_RAIN, 6201: C.FREEZING_RAIN,
    7000: C.SLEET, 7101: C.HEAVY_SNOW, 7102: C.SLEET, 8000: C.THUNDERSTORMS,
}

WEATHERBIT_CODES: Dict[int, StandardWeatherCondition] = {
    200: C.THUNDERSTORMS, 201: C.THUNDERSTORMS, 202: C.THUNDERSTORMS, 230: C.THUNDERSTORMS,
    231: C.THUNDERSTORMS, 232: C.THUNDERSTORMS, 233: C.HAIL,
    300: C.DRIZZLE, 301: C.DRIZZLE, 302: C.DRIZZLE,
    500: C.LIGHT_RAIN, 501: C.RAIN, 502: C.HEAVY_RAIN, 511: C.FREEZING_RAIN,
    520: C.SHOWERS, 521: C.SHOWERS, 522: C.SHOWERS,
    600: C.LIGHT_SNOW, 601: C.SNOW, 602: C.HEAVY_SNOW, 610: C.MIXED, 611: C.SLEET, 612: C.SLEET,
    621: C.SNOW, 622: C.HEAVY_SNOW, 623: C.FLURRIES,
    700: C.MIST, 711: C.SMOKE, 721: C.HAZE, 731: C.DUST, 741: C.FOG, 751: C.FOG,
    800: C.CLEAR, 801: C.PARTLY_CLOUDY, 802: C.PARTLY_CLOUDY, 803: C.MOSTLY_CLOUDY, 804: C.OVERCAST,
}

_COMPOUND_SEPARATOR = re.compile(r" and |/")


def standardize_nws(text: Optional[str]) -> StandardWeatherCondition:
    """Map NWS ``textDescription`` values, including "A and B" / "A/B" forms."""
    if not text:
        return C.UNKNOWN
    if text in NWS_TEXT:
        return NWS_TEXT[text]
    for part in _COMPOUND_SEPARATOR.split(text):
        condition = NWS_TEXT.get(part.strip())
        if condition is not None:
            return condition
    logger.debug("Unknown NWS condition %r", text)
    return C.UNKNOWN


def standardize_openweather(weather_id: Optional[int]) -> StandardWeatherCondition:
    if weather_id is None:
        return C.UNKNOWN
    if 200 <= weather_id < 300:
        return C.THUNDERSTORMS
    condition = OPENWEATHER_IDS.get(weather_id)
    if condition is None:
        logger.debug("Unrecognized OpenWeather condition id %s", weather_id)
        return C.UNKNOWN
    return condition


def standardize_tomorrow(code: Optional[int]) -> StandardWeatherCondition:
    if code is None:
        return C.UNKNOWN
    return TOMORROW_CODES.get(code, C.UNKNOWN)


def standardize_weatherbit(code: Optional[int]) -> StandardWeatherCondition:
    if code is None:
        return C.UNKNOWN
    return WEATHERBIT_CODES.get(code, C.UNKNOWN)


__all__ = [
    "StandardWeatherCondition",
    "standardize_nws",
    "standardize_openweather",
    "standardize_tomorrow",
    "standardize_weatherbit",
]
