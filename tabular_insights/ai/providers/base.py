from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx


class ProviderError(RuntimeError):
    pass


class ProviderConfigError(ProviderError):
    pass


class ProviderCallFailed(ProviderError):
    """A single provider attempt failed (network, HTTP status, bad payload)."""


class ModelNotFoundError(ProviderCallFailed):
    pass


class ModelLoadingError(ProviderCallFailed):
    """The model is warming up; the caller may retry after `retry_after` seconds."""

    def __init__(self, message: str, retry_after: Optional[int] = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class AIProvider(ABC):
    """
    One external text-generation service.

    generate() returns the answer text or raises a ProviderError subclass;
    it never returns an empty string.
    """

    name: str = ""

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: Optional[str] = None,
        timeout_seconds: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.model_override = (model or "").strip() or None
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ProviderConfigError(f"{self.name} API key is not configured.")
        return self.api_key

    @asynccontextmanager
    async def http_session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout_seconds, follow_redirects=True) as client:
            yield client

    @abstractmethod
    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str: ...


def error_message_from(resp: httpx.Response) -> str:
    """Best-effort error text from a provider error body."""
    try:
        payload = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict):
            return str(err.get("message") or err)
        if err:
            return str(err)
        if payload.get("message"):
            return str(payload["message"])
    return resp.reason_phrase


__all__ = [
    "AIProvider",
    "ModelLoadingError",
    "ModelNotFoundError",
    "ProviderCallFailed",
    "ProviderConfigError",
    "ProviderError",
    "error_message_from",
]
