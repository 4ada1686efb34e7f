from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from .base import AIProvider, ProviderCallFailed

logger = logging.getLogger(__name__)


class OpenAIProvider(AIProvider):
    """OpenAI chat completions: one model, system + user messages."""

    name = "openai"

    DEFAULT_MODEL = "gpt-3.5-turbo"
    TEMPERATURE = 0.7
    MAX_TOKENS = 1000

    def __init__(self, *, client: Optional[AsyncOpenAI] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._client = client

    @property
    def model(self) -> str:
        return self.model_override or self.DEFAULT_MODEL

    @asynccontextmanager
    async def openai_client(self) -> AsyncIterator[AsyncOpenAI]:
        if self._client is not None:
            yield self._client
            return
        async with AsyncOpenAI(api_key=self.api_key, timeout=self.timeout_seconds) as client:
            yield client

    @staticmethod
    def build_messages(prompt: str, system_prompt: Optional[str] = None) -> List[Dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        self.require_api_key()
        logger.info(f"Attempting OpenAI API with model: {self.model}")

        try:
            async with self.openai_client() as client:
                completion = await client.chat.completions.create(
                    model=self.model,
                    messages=self.build_messages(prompt, system_prompt),
                    temperature=self.TEMPERATURE,
                    max_tokens=self.MAX_TOKENS,
                )
        except OpenAIError as exc:
            raise ProviderCallFailed(f"OpenAI API error: {exc}") from exc

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise ProviderCallFailed("OpenAI API returned empty response")
        return content.strip()


__all__ = ["OpenAIProvider"]
