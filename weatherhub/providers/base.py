from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .capabilities import ProviderCapability, ProviderErrorCode
from .error_mapper import error_from_exception, error_from_response
from .errors import ProviderError
from ..entities import WeatherData


ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class RequestConfig:
    timeout: float = 10.0
    retries: int = 0
    backoff_factor: float = 0.3
    status_forcelist: Iterable[int] = (500, 502, 503, 504)


class WeatherProvider:
    """Base class that adds retry/timeouts and error classification for HTTP providers.

    Subclasses set ``name`` and ``capability`` and implement :meth:`get_weather`.
    Every failure leaves this class as a :class:`ProviderError` with a code.
    """

    name: str = ""
    capability: ProviderCapability = ProviderCapability()
    requires_api_key: bool = False

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
    ) -> None:
        self.request_config = request_config or RequestConfig()
        self.session = session or self._build_session(self.request_config)
        self._log = logging.getLogger(self.__class__.__name__)

    def get_weather(self, latitude: float, longitude: float) -> WeatherData:  # pragma: no cover - abstract
        raise NotImplementedError

    def _build_session(self, config: RequestConfig) -> requests.Session:
        session = requests.Session()
        if config.retries:
            retry = Retry(
                total=config.retries,
                backoff_factor=config.backoff_factor,
                status_forcelist=tuple(config.status_forcelist),
                allowed_methods=frozenset({"GET"}),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        return session

    def _handle_response(self, response: Response, endpoint: str) -> Response:
        if response.status_code == 429:
            self._log.warning("Quota exceeded for %s", endpoint)
            raise error_from_response(self.name, endpoint, response)
        if response.status_code >= 400:
            self._log.error("Provider returned %s for %s", response.status_code, endpoint)
            raise error_from_response(self.name, endpoint, response)
        return response

    def _request(self, method: str, url: str, **kwargs) -> Response:
        self._log.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.request_config.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            self._log.error("Request to %s failed", url, exc_info=exc)
            raise error_from_exception(self.name, url, exc) from exc
        return self._handle_response(response, url)

    def _json(self, response: Response, endpoint: str) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError as exc:
            self._log.error("Invalid JSON from %s", endpoint, exc_info=exc)
            raise self._parse_error("invalid JSON response", endpoint) from exc

    def _get_model(self, url: str, model: Type[ModelT], **kwargs) -> ModelT:
        response = self._request("GET", url, **kwargs)
        payload = self._json(response, url)
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            self._log.error("Unexpected payload from %s: %s", url, exc)
            raise self._parse_error("Invalid weather data", url) from exc

    def _parse_error(self, message: str, endpoint: Optional[str] = None) -> ProviderError:
        return ProviderError(message, code=ProviderErrorCode.PARSE, provider=self.name, endpoint=endpoint)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


__all__ = ["ProviderError", "RequestConfig", "WeatherProvider"]
