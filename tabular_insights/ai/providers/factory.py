from __future__ import annotations

from typing import List, Optional

import httpx

from tabular_insights.ai.config import FALLBACK_ORDER, AIProviderConfig

from .base import AIProvider, ProviderConfigError
from .gemini import GeminiProvider
from .huggingface import HuggingFaceProvider
from .openai import OpenAIProvider


def build_provider(
    provider_id: str,
    config: AIProviderConfig,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> AIProvider:
    pid = (provider_id or "").strip().lower()
    common = dict(
        api_key=config.credential_for(pid),
        model=config.model_for(pid),
        timeout_seconds=config.request_timeout,
        http_client=http_client,
    )

    if pid == "huggingface":
        return HuggingFaceProvider(base_url=config.huggingface_base_url, **common)

    if pid == "gemini":
        return GeminiProvider(discovery_timeout=config.gemini_discovery_timeout, **common)

    if pid == "openai":
        return OpenAIProvider(**common)

    raise ProviderConfigError(f"Unsupported provider: {provider_id!r}")


def build_providers(
    config: AIProviderConfig,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> List[AIProvider]:
    """One provider per supported service, in fallback order."""
    return [build_provider(pid, config, http_client=http_client) for pid in FALLBACK_ORDER]


__all__ = ["build_provider", "build_providers"]
