"""
Multi-provider AI access.

Exports:
- AIProviderConfig: explicit provider configuration (the gateway lives in ai.gateway)
"""

from tabular_insights.ai.config import AIProviderConfig, FALLBACK_ORDER, PROVIDER_NAMES

__all__ = [
    "AIProviderConfig",
    "FALLBACK_ORDER",
    "PROVIDER_NAMES",
]
