"""
Explicit configuration handed to the AI gateway.

Providers read credentials and model overrides from this object only.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

PROVIDER_NAMES = ("huggingface", "gemini", "openai")

# Order used after the preferred provider has been tried.
FALLBACK_ORDER = PROVIDER_NAMES


class AIProviderConfig(BaseModel):
    """Preferred provider, per-provider credentials and model overrides."""
    preferred_provider: str = "huggingface"
    credentials: Dict[str, Optional[str]] = Field(default_factory=dict)
    model_overrides: Dict[str, Optional[str]] = Field(default_factory=dict)
    request_timeout: float = 60.0
    gemini_discovery_timeout: float = 2.0
    huggingface_base_url: str = "https://api-inference.huggingface.co/models"

    @field_validator("preferred_provider")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        return (value or "").strip().lower()

    def credential_for(self, provider: str) -> Optional[str]:
        key = (self.credentials.get(provider) or "").strip()
        return key or None

    def model_for(self, provider: str) -> Optional[str]:
        model = (self.model_overrides.get(provider) or "").strip()
        return model or None

    @property
    def configured_providers(self) -> List[str]:
        """Providers holding a credential, in fallback order."""
        return [name for name in FALLBACK_ORDER if self.credential_for(name)]
