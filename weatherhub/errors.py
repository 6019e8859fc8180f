from __future__ import annotations


class WeatherServiceError(RuntimeError):
    """Base class for errors raised by the weather service itself."""


class ConfigurationError(WeatherServiceError):
    """Raised at construction time when the service is misconfigured."""


class ProviderNotSupportedError(ConfigurationError):
    """Raised when a configured provider name has no client."""


class InvalidCoordinatesError(WeatherServiceError, ValueError):
    """Raised for latitude/longitude values outside the valid range."""


class InvalidProviderLocationError(WeatherServiceError):
    """Raised when a region-restricted provider cannot serve a location."""


class NoProviderAvailableError(WeatherServiceError):
    """Raised when no candidate provider was left to try."""


__all__ = [
    "ConfigurationError",
    "InvalidCoordinatesError",
    "InvalidProviderLocationError",
    "NoProviderAvailableError",
    "ProviderNotSupportedError",
    "WeatherServiceError",
]
