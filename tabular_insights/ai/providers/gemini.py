from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional

import httpx
from google import genai
from google.genai import types as genai_types

from .base import AIProvider, ProviderCallFailed, error_message_from

logger = logging.getLogger(__name__)


def _default_sdk_client(api_key: str) -> Any:
    return genai.Client(api_key=api_key)


class GeminiProvider(AIProvider):
    """
    Google Gemini.

    Candidate models come from the optional model-list endpoint (time-boxed)
    or a static list. The SDK is tried model by model; a not-found error moves
    on to the next model, anything else aborts. If every SDK candidate was
    not found, a direct REST call is attempted before giving up.
    """

    name = "gemini"

    API_ROOT = "https://generativelanguage.googleapis.com"
    LIST_ENDPOINTS = ("/v1/models", "/v1beta/models")

    # flash variants first, then pro variants
    PRIORITY_MODELS = [
        "gemini-2.5-flash",
        "gemini-2.0-flash",
        "gemini-1.5-flash",
        "gemini-1.5-flash-latest",
        "gemini-2.5-pro",
        "gemini-1.5-pro",
        "gemini-pro",
    ]
    STATIC_MODELS = [
        "gemini-2.5-flash",
        "gemini-2.0-flash",
        "gemini-1.5-flash",
        "gemini-1.5-flash-latest",
        "gemini-2.5-pro",
        "gemini-1.5-pro",
        "gemini-1.5-pro-latest",
        "gemini-pro",
    ]
    REST_STATIC_MODELS = ["gemini-2.0-flash", "gemini-1.5-flash", "gemini-1.5-pro"]

    TEMPERATURE = 0.7
    MAX_OUTPUT_TOKENS = 1000
    TOP_P = 0.95

    def __init__(
        self,
        *,
        discovery_timeout: float = 2.0,
        sdk_client_factory: Optional[Callable[[str], Any]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.discovery_timeout = discovery_timeout
        self._sdk_client_factory = sdk_client_factory or _default_sdk_client

    # -- model discovery -------------------------------------------------

    async def discover_models(self) -> Optional[List[str]]:
        """Models supporting generateContent, or None if the list is unavailable."""
        try:
            async with self.http_session() as client:
                resp = None
                for path in self.LIST_ENDPOINTS:
                    resp = await client.get(
                        f"{self.API_ROOT}{path}",
                        headers={"Accept": "application/json", "x-goog-api-key": self.api_key},
                    )
                    if resp.status_code < 400:
                        break
        except httpx.HTTPError as exc:
            logger.info(f"Could not fetch available Gemini models: {exc}")
            return None

        if resp is None or resp.status_code >= 400:
            status = resp.status_code if resp is not None else "n/a"
            logger.info(f"Gemini model list API response: {status}")
            return None

        try:
            payload = resp.json()
        except ValueError:
            return None

        rows = payload.get("models") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            return None

        models = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            if "generateContent" not in (row.get("supportedGenerationMethods") or []):
                continue
            name = str(row.get("name") or "").strip()
            if name:
                models.append(name.split("/", 1)[1] if name.startswith("models/") else name)
        return models or None

    async def list_available_models(self) -> Optional[List[str]]:
        try:
            return await asyncio.wait_for(self.discover_models(), timeout=self.discovery_timeout)
        except asyncio.TimeoutError:
            logger.info("Gemini model discovery timed out, using static model list")
            return None

    def candidate_models(self, available: Optional[List[str]]) -> List[str]:
        models: List[str] = []
        if self.model_override:
            models.append(self.model_override)

        if available:
            for name in self.PRIORITY_MODELS:
                if name in available and name not in models:
                    models.append(name)
            for name in available:
                if "gemini" in name and name not in models:
                    models.append(name)
        else:
            for name in self.STATIC_MODELS:
                if name not in models:
                    models.append(name)
        return models

    # -- generation ------------------------------------------------------

    @staticmethod
    def is_model_not_found(exc: BaseException) -> bool:
        if getattr(exc, "code", None) == 404:
            return True
        message = str(exc)
        return "not found" in message.lower() or "404" in message or "NOT_FOUND" in message

    async def _generate_with_sdk(self, client: Any, model_name: str, full_prompt: str) -> str:
        response = await client.aio.models.generate_content(
            model=model_name,
            contents=full_prompt,
            config=genai_types.GenerateContentConfig(
                temperature=self.TEMPERATURE,
                max_output_tokens=self.MAX_OUTPUT_TOKENS,
                top_p=self.TOP_P,
            ),
        )
        return (getattr(response, "text", None) or "").strip()

    async def _generate_with_rest(self, models: List[str], full_prompt: str) -> Optional[str]:
        body = {
            "contents": [{"parts": [{"text": full_prompt}]}],
            "generationConfig": {
                "temperature": self.TEMPERATURE,
                "maxOutputTokens": self.MAX_OUTPUT_TOKENS,
                "topP": self.TOP_P,
            },
        }

        async with self.http_session() as client:
            for model_name in models:
                logger.info(f"Trying Gemini REST API with model: {model_name}")
                try:
                    resp = await client.post(
                        f"{self.API_ROOT}/v1beta/models/{model_name}:generateContent",
                        headers={
                            "Content-Type": "application/json",
                            "x-goog-api-key": self.api_key,
                        },
                        json=body,
                    )
                except httpx.HTTPError as exc:
                    raise ProviderCallFailed(f"Gemini REST API request failed: {exc}") from exc

                if resp.status_code == 404:
                    logger.info(f"Gemini REST API: model {model_name} not found, trying next...")
                    continue
                if resp.status_code >= 400:
                    raise ProviderCallFailed(
                        f"Gemini REST API error: {resp.status_code} - {error_message_from(resp)}"
                    )

                text = self.extract_rest_text(resp)
                if text:
                    logger.info(f"Gemini REST API succeeded with model: {model_name}")
                    return text
        return None

    @staticmethod
    def extract_rest_text(resp: httpx.Response) -> str:
        try:
            payload = resp.json()
        except ValueError:
            return ""
        if not isinstance(payload, dict):
            return ""
        cands = payload.get("candidates")
        if not isinstance(cands, list) or not cands or not isinstance(cands[0], dict):
            return ""
        content = cands[0].get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if isinstance(parts, list) and parts and isinstance(parts[0], dict):
            return str(parts[0].get("text") or "").strip()
        return ""

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        self.require_api_key()
        full_prompt = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt

        available = await self.list_available_models()
        if available:
            logger.info(f"Found {len(available)} available Gemini models: {', '.join(available[:5])}")
        else:
            logger.info("Could not fetch Gemini model list, trying common model names...")

        client = self._sdk_client_factory(self.api_key)
        last_error: Optional[BaseException] = None
        for model_name in self.candidate_models(available):
            logger.info(f"Attempting Gemini API with model: {model_name}")
            try:
                text = await self._generate_with_sdk(client, model_name, full_prompt)
            except Exception as exc:
                logger.info(f"Gemini model {model_name} failed: {exc}")
                if not self.is_model_not_found(exc):
                    raise ProviderCallFailed(f"Gemini API error: {exc}") from exc
                last_error = exc
                continue

            if not text:
                raise ProviderCallFailed("Gemini API returned empty response")
            logger.info(f"Gemini API succeeded with model: {model_name}")
            return text

        logger.info("All Gemini SDK models failed, trying REST API with direct call...")
        rest_models = available[:3] if available else list(self.REST_STATIC_MODELS)
        text = await self._generate_with_rest(rest_models, full_prompt)
        if text:
            return text

        detail = (
            f"Available models: {', '.join(available)}. None of them worked with your API key."
            if available
            else "Could not determine available models."
        )
        raise ProviderCallFailed(
            f"All Gemini models failed. {detail} Last error: {last_error or 'Unknown error'}"
        )


__all__ = ["GeminiProvider"]
