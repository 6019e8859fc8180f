"""Classify HTTP failures into the provider error taxonomy."""
from __future__ import annotations

from typing import Mapping, Optional

import requests

from .capabilities import ProviderErrorCode
from .errors import ProviderError, QuotaExceeded


def classify_status(status: Optional[int]) -> ProviderErrorCode:
    if status is None:
        return ProviderErrorCode.NETWORK
    if status == 429:
        return ProviderErrorCode.RATE_LIMIT
    if status == 404:
        return ProviderErrorCode.NOT_FOUND
    if status in (400, 422):
        return ProviderErrorCode.VALIDATION
    if status >= 500:
        return ProviderErrorCode.UPSTREAM
    return ProviderErrorCode.UNAVAILABLE


def parse_retry_after_ms(headers: Optional[Mapping[str, str]]) -> Optional[int]:
    """Convert a ``Retry-After`` header in seconds to milliseconds.

    HTTP-date values are not interpreted and yield ``None``.
    """
    if not headers:
        return None
    value = headers.get("Retry-After") or headers.get("retry-after")
    if not value:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return int(seconds * 1000)


def error_from_response(provider: str, endpoint: str, response: requests.Response) -> ProviderError:
    status = response.status_code
    code = classify_status(status)
    message = f"Request failed with status code {status}"
    if code is ProviderErrorCode.RATE_LIMIT:
        return QuotaExceeded(
            message,
            provider=provider,
            status=status,
            retry_after_ms=parse_retry_after_ms(response.headers),
            endpoint=endpoint,
        )
    return ProviderError(message, code=code, provider=provider, status=status, endpoint=endpoint)


def error_from_exception(provider: str, endpoint: str, exc: requests.RequestException) -> ProviderError:
    response = getattr(exc, "response", None)
    if response is not None:
        return error_from_response(provider, endpoint, response)
    if isinstance(exc, requests.Timeout):
        code = ProviderErrorCode.TIMEOUT
    else:
        code = ProviderErrorCode.NETWORK
    return ProviderError(str(exc) or code.value, code=code, provider=provider, endpoint=endpoint)


__all__ = [
    "classify_status",
    "error_from_exception",
    "error_from_response",
    "parse_retry_after_ms",
]
