from __future__ import annotations

from typing import Dict, Optional, Type

import requests

from .base import RequestConfig, WeatherProvider
from .capabilities import ProviderCapability, ProviderId
from .nws import NwsProvider
from .openweather import OpenWeatherProvider
from .tomorrow import TomorrowProvider
from .weatherbit import WeatherbitProvider
from ..errors import ProviderNotSupportedError


PROVIDERS: Dict[ProviderId, Type[WeatherProvider]] = {
    NwsProvider.name: NwsProvider,
    OpenWeatherProvider.name: OpenWeatherProvider,
    TomorrowProvider.name: TomorrowProvider,
    WeatherbitProvider.name: WeatherbitProvider,
}


def create_provider(
    name: str,
    api_key: Optional[str] = None,
    *,
    session: Optional[requests.Session] = None,
    request_config: Optional[RequestConfig] = None,
    user_agent: Optional[str] = None,
) -> WeatherProvider:
    try:
        provider_cls = PROVIDERS[name]
    except KeyError:
        raise ProviderNotSupportedError(f"Provider {name} is not supported yet") from None
    kwargs = {"session": session, "request_config": request_config}
    if provider_cls is NwsProvider:
        return NwsProvider(user_agent=user_agent, **kwargs)
    return provider_cls(api_key, **kwargs)


def builtin_capabilities() -> Dict[ProviderId, ProviderCapability]:
    return {name: provider_cls.capability for name, provider_cls in PROVIDERS.items()}


__all__ = ["PROVIDERS", "builtin_capabilities", "create_provider"]
