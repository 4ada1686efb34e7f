"""
AI provider clients.
"""

from .base import (
    AIProvider,
    ModelLoadingError,
    ModelNotFoundError,
    ProviderCallFailed,
    ProviderConfigError,
    ProviderError,
)
from .factory import build_provider, build_providers
from .gemini import GeminiProvider
from .huggingface import HuggingFaceProvider
from .openai import OpenAIProvider

__all__ = [
    "AIProvider",
    "GeminiProvider",
    "HuggingFaceProvider",
    "ModelLoadingError",
    "ModelNotFoundError",
    "OpenAIProvider",
    "ProviderCallFailed",
    "ProviderConfigError",
    "ProviderError",
    "build_provider",
    "build_providers",
]
