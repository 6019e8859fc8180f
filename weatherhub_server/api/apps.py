from __future__ import annotations

from pathlib import Path

from django.apps import AppConfig


class WeatherApiConfig(AppConfig):
    name = "weatherhub_server.api"
    label = "weather_api"
    path = str(Path(__file__).resolve().parent)
