from __future__ import annotations

from typing import Optional

from .capabilities import ProviderErrorCode


class ProviderError(RuntimeError):
    """A provider call failed; ``code`` classifies the failure."""

    def __init__(
        self,
        message: str,
        *,
        code: ProviderErrorCode = ProviderErrorCode.UNAVAILABLE,
        provider: str = "",
        status: Optional[int] = None,
        retry_after_ms: Optional[int] = None,
        endpoint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.provider = provider
        self.status = status
        self.retry_after_ms = retry_after_ms
        self.endpoint = endpoint

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({str(self)!r}, code={self.code.value}, "
            f"provider={self.provider!r}, status={self.status})"
        )


class QuotaExceeded(ProviderError):
    """Raised when a provider reports a quota/usage limit issue."""

    def __init__(self, message: str = "quota exceeded", **kwargs) -> None:
        kwargs["code"] = ProviderErrorCode.RATE_LIMIT
        super().__init__(message, **kwargs)


__all__ = ["ProviderError", "QuotaExceeded"]
