"""
AI provider gateway with automatic fallback.

The preferred provider is tried first, then the remaining credentialed
providers in FALLBACK_ORDER. Per-attempt failures are logged and collected;
the caller only sees an error once every attempt is exhausted.
"""

import logging
from typing import Dict, List, Optional, Sequence

from tabular_insights.ai.config import FALLBACK_ORDER, AIProviderConfig
from tabular_insights.ai.providers import AIProvider, ProviderError, build_providers
from tabular_insights.api.exceptions import AllProvidersFailedError, NoProviderConfiguredError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful data analyst assistant. "
    "Provide clear, actionable insights from data summaries."
)


class AIGateway:
    """Uniform generate() over HuggingFace, Gemini and OpenAI."""

    def __init__(
        self,
        config: AIProviderConfig,
        providers: Optional[Sequence[AIProvider]] = None,
    ):
        self.config = config
        self.providers: List[AIProvider] = (
            list(providers) if providers is not None else build_providers(config)
        )

    @property
    def is_configured(self) -> bool:
        """True when at least one provider holds a credential."""
        return any(p.is_configured for p in self.providers)

    def provider_chain(self) -> List[AIProvider]:
        """Credentialed providers in the order they will be attempted."""
        by_name: Dict[str, AIProvider] = {p.name: p for p in self.providers}
        chain: List[AIProvider] = []

        preferred_name = self.config.preferred_provider
        preferred = by_name.get(preferred_name)
        if preferred is None:
            if preferred_name:
                logger.warning(f"Unknown AI provider '{preferred_name}', using fallback chain")
        elif preferred.is_configured:
            chain.append(preferred)
        else:
            logger.warning(f"{preferred_name} API key not configured, using fallback chain")

        for name in FALLBACK_ORDER:
            provider = by_name.get(name)
            if provider is None or provider is preferred or not provider.is_configured:
                continue
            chain.append(provider)
        return chain

    async def generate(self, prompt: str, system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> str:
        """
        Return the first successful provider answer.

        Raises:
            NoProviderConfiguredError: no provider has a credential (no network call is made)
            AllProvidersFailedError: every credentialed provider failed
        """
        chain = self.provider_chain()
        if not chain:
            raise NoProviderConfiguredError()

        errors: Dict[str, str] = {}
        for index, provider in enumerate(chain):
            if index > 0:
                logger.info(f"Trying {provider.name} as fallback...")
            try:
                text = await provider.generate(prompt, system_prompt)
            except ProviderError as exc:
                logger.error(f"Error with {provider.name} provider: {exc}")
                errors[provider.name] = str(exc)
                continue
            except Exception as exc:
                logger.exception(f"Unexpected error with {provider.name} provider")
                errors[provider.name] = f"{type(exc).__name__}: {exc}"
                continue

            logger.info(f"AI response generated by {provider.name}")
            return text

        raise AllProvidersFailedError(errors)
