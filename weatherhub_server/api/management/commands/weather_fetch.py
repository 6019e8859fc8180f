"""Management command to fetch weather using the same stack as the API."""
from __future__ import annotations

import json
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from weatherhub.errors import InvalidCoordinatesError, WeatherServiceError
from weatherhub.providers.errors import ProviderError
from weatherhub_server.api.views import get_weather_service, provider_failure_payload


class Command(BaseCommand):
    help = "Fetch current weather for the provided coordinates"

    def add_arguments(self, parser) -> None:  # noqa: D401
        parser.add_argument("--lat", type=float, help="Latitude")
        parser.add_argument("--lon", type=float, help="Longitude")
        parser.add_argument("--fresh", action="store_true", help="Bypass the cache")

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        latitude = options.get("lat")
        longitude = options.get("lon")
        if latitude is None or longitude is None:
            raise CommandError("--lat and --lon are required")

        service = get_weather_service()
        try:
            record = service.get_weather(latitude, longitude, bypass_cache=options.get("fresh", False))
        except InvalidCoordinatesError as exc:
            raise CommandError(str(exc)) from exc
        except (ProviderError, WeatherServiceError) as exc:
            failure = provider_failure_payload(exc)
            raise CommandError(f"All weather providers failed: {failure['code']} {failure['detail']}") from exc

        self.stdout.write(json.dumps(record.as_dict()))
