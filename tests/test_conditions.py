from __future__ import annotations

import pytest

from weatherhub.conditions import (
    StandardWeatherCondition,
    standardize_nws,
    standardize_openweather,
    standardize_tomorrow,
    standardize_weatherbit,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Sunny", StandardWeatherCondition.CLEAR),
        ("Partly Cloudy", StandardWeatherCondition.PARTLY_CLOUDY),
        ("Light Rain and Fog", StandardWeatherCondition.LIGHT_RAIN),
        ("Rain/Snow", StandardWeatherCondition.MIXED),
        ("Haze/Smoke", StandardWeatherCondition.HAZE),
        ("Volcanic Ash", StandardWeatherCondition.UNKNOWN),
        (None, StandardWeatherCondition.UNKNOWN),
        ("", StandardWeatherCondition.UNKNOWN),
    ],
)
def test_nws_text_mapping(text, expected) -> None:
    assert standardize_nws(text) is expected


def test_openweather_ids() -> None:
    assert standardize_openweather(500) is StandardWeatherCondition.LIGHT_RAIN
    assert standardize_openweather(800) is StandardWeatherCondition.CLEAR
    assert standardize_openweather(804) is StandardWeatherCondition.OVERCAST
    assert standardize_openweather(211) is StandardWeatherCondition.THUNDERSTORMS
    assert standardize_openweather(999) is StandardWeatherCondition.UNKNOWN
    assert standardize_openweather(None) is StandardWeatherCondition.UNKNOWN


def test_tomorrow_and_weatherbit_codes() -> None:
    assert standardize_tomorrow(1000) is StandardWeatherCondition.CLEAR
    assert standardize_tomorrow(8000) is StandardWeatherCondition.THUNDERSTORMS
    assert standardize_tomorrow(-1) is StandardWeatherCondition.UNKNOWN
    assert standardize_weatherbit(233) is StandardWeatherCondition.HAIL
    assert standardize_weatherbit(741) is StandardWeatherCondition.FOG
    assert standardize_weatherbit(None) is StandardWeatherCondition.UNKNOWN


def test_condition_values_are_display_strings() -> None:
    assert StandardWeatherCondition.MOSTLY_CLOUDY.value == "Mostly Cloudy"
    assert StandardWeatherCondition("Freezing Rain") is StandardWeatherCondition.FREEZING_RAIN
