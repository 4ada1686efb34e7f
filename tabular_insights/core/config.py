"""
Configuration settings for the Tabular Insights service.
Uses pydantic-settings for environment variable loading.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from tabular_insights.ai.config import AIProviderConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    api_debug: bool = False
    environment: str = "development"
    cors_origins: str = "*"
    log_level: str = "INFO"

    # PostgreSQL Configuration
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "tabular_insights"
    postgres_pool_size: int = 10
    postgres_max_overflow: int = 20

    @property
    def postgres_async_url(self) -> str:
        """Construct async PostgreSQL connection URL."""
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    # Upload Configuration
    upload_tmp_dir: str = "/tmp/tabular_insights"
    max_file_size_mb: int = 10

    @property
    def max_file_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origin_list(self) -> list:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # LLM Configuration
    ai_provider: str = "huggingface"
    ai_request_timeout: float = 60.0

    huggingface_api_key: Optional[str] = None
    huggingface_model: Optional[str] = None
    huggingface_base_url: str = "https://api-inference.huggingface.co/models"

    gemini_api_key: Optional[str] = None
    gemini_model: Optional[str] = None
    gemini_discovery_timeout: float = 2.0

    openai_api_key: Optional[str] = None
    openai_model: Optional[str] = None

    def ai_provider_config(self) -> AIProviderConfig:
        """Build the explicit provider configuration handed to the AI gateway."""
        return AIProviderConfig(
            preferred_provider=self.ai_provider,
            credentials={
                "huggingface": self.huggingface_api_key,
                "gemini": self.gemini_api_key,
                "openai": self.openai_api_key,
            },
            model_overrides={
                "huggingface": self.huggingface_model,
                "gemini": self.gemini_model,
                "openai": self.openai_model,
            },
            request_timeout=self.ai_request_timeout,
            gemini_discovery_timeout=self.gemini_discovery_timeout,
            huggingface_base_url=self.huggingface_base_url,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
