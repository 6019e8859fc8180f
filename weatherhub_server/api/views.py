"""REST API views for weather information."""
from __future__ import annotations

import logging
from functools import lru_cache

from django.conf import settings
from django.core.cache import caches
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from weatherhub.cache import DjangoCache
from weatherhub.errors import InvalidCoordinatesError, NoProviderAvailableError, WeatherServiceError
from weatherhub.providers.base import RequestConfig
from weatherhub.providers.capabilities import FallbackPolicyConfig, ProviderErrorCode
from weatherhub.providers.errors import ProviderError
from weatherhub.services.weather import WeatherService


logger = logging.getLogger(__name__)

TRUTHY = {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def get_weather_service() -> WeatherService:
    cache_backend = DjangoCache(
        caches[settings.WEATHER_CACHE_ALIAS],
        default_ttl=settings.WEATHER_CACHE_TIMEOUT,
    )
    return WeatherService(
        providers=settings.WEATHER_PROVIDERS,
        api_keys=settings.WEATHER_API_KEYS,
        cache=cache_backend,
        cache_ttl=settings.WEATHER_CACHE_TIMEOUT,
        geohash_precision=settings.WEATHER_GEOHASH_PRECISION,
        policy=FallbackPolicyConfig.from_dict(settings.WEATHER_FALLBACK_POLICY),
        request_config=RequestConfig(timeout=settings.WEATHER_PROVIDER_TIMEOUT),
        user_agent=settings.WEATHER_NWS_USER_AGENT,
    )


def provider_failure_payload(exc: Exception) -> dict:
    """Describe the last provider failure for API and CLI consumers."""
    if isinstance(exc, ProviderError):
        return {"detail": str(exc), "code": exc.code.value, "provider": exc.provider or None}
    return {"detail": str(exc), "code": ProviderErrorCode.UNAVAILABLE.value, "provider": None}


class WeatherView(APIView):
    """Provide normalized weather data for requested coordinates."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):  # noqa: D401
        """Return the weather record for the specified coordinates."""
        try:
            latitude = float(request.query_params["lat"])
            longitude = float(request.query_params["lon"])
        except KeyError:
            return Response({"detail": "lat and lon query parameters are required"}, status=status.HTTP_400_BAD_REQUEST)
        except ValueError:
            return Response({"detail": "lat and lon must be valid floating point numbers"}, status=status.HTTP_400_BAD_REQUEST)
        fresh = request.query_params.get("fresh", "").lower() in TRUTHY

        service = get_weather_service()
        try:
            record = service.get_weather(latitude, longitude, bypass_cache=fresh)
        except InvalidCoordinatesError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except NoProviderAvailableError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except (ProviderError, WeatherServiceError) as exc:
            logger.warning("All weather providers failed for %s,%s: %s", latitude, longitude, exc)
            return Response(provider_failure_payload(exc), status=status.HTTP_502_BAD_GATEWAY)
        return Response(record.as_dict(), status=status.HTTP_200_OK)


class ProviderHealthView(APIView):
    """Expose per-provider health and circuit state."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):  # noqa: D401
        return Response({"providers": get_weather_service().registry.snapshot()}, status=status.HTTP_200_OK)
