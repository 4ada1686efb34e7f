from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

import httpx

from .base import (
    AIProvider,
    ModelLoadingError,
    ModelNotFoundError,
    ProviderCallFailed,
    error_message_from,
)

logger = logging.getLogger(__name__)


class HuggingFaceProvider(AIProvider):
    """Hugging Face Inference API (text generation and zero-shot classification)."""

    name = "huggingface"

    DEFAULT_MODEL = "gpt2"
    DEFAULT_BASE_URL = "https://api-inference.huggingface.co/models"

    # Model families that take candidate labels instead of a prompt.
    CLASSIFICATION_MARKERS = ("bart-large-mnli", "roberta")
    CANDIDATE_LABELS = ["insight", "issue", "suggestion", "other"]
    GENERATION_PARAMETERS = {
        "max_new_tokens": 512,
        "temperature": 0.7,
        "top_p": 0.95,
        "return_full_text": False,
    }

    def __init__(self, *, base_url: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")

    @property
    def model(self) -> str:
        return self.model_override or self.DEFAULT_MODEL

    def is_classification_model(self) -> bool:
        return any(marker in self.model for marker in self.CLASSIFICATION_MARKERS)

    def build_payload(self, prompt: str, system_prompt: Optional[str] = None) -> Dict[str, Any]:
        if self.is_classification_model():
            return {
                "inputs": prompt,
                "parameters": {"candidate_labels": list(self.CANDIDATE_LABELS)},
            }

        full_prompt = (
            f"{system_prompt}\n\nUser Question: {prompt}\n\nAssistant Response:"
            if system_prompt
            else prompt
        )
        return {"inputs": full_prompt, "parameters": dict(self.GENERATION_PARAMETERS)}

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        api_key = self.require_api_key()
        model = self.model
        logger.info(f"Attempting Hugging Face API with model: {model}")

        try:
            async with self.http_session() as client:
                resp = await client.post(
                    f"{self.base_url}/{model}",
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                    },
                    json=self.build_payload(prompt, system_prompt),
                )
        except httpx.HTTPError as exc:
            raise ProviderCallFailed(f"Hugging Face request failed: {exc}") from exc

        if resp.status_code >= 400:
            self._raise_for_status(resp, model)

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderCallFailed("Hugging Face API returned a non-JSON response") from exc

        return self.extract_text(data)

    @staticmethod
    def _raise_for_status(resp: httpx.Response, model: str) -> None:
        try:
            payload = resp.json()
        except ValueError:
            payload = {}
        estimated = payload.get("estimated_time") if isinstance(payload, dict) else None

        if resp.status_code == 503 and estimated:
            wait = int(math.ceil(float(estimated)))
            raise ModelLoadingError(
                f'Hugging Face model "{model}" is loading. '
                f"Please wait {wait} seconds and try again.",
                retry_after=wait,
            )

        if resp.status_code == 404:
            raise ModelNotFoundError(
                f'Hugging Face model "{model}" not found (404). The model may not be '
                "available on the Inference API. Try setting HUGGINGFACE_MODEL=gpt2."
            )

        raise ProviderCallFailed(
            f"Hugging Face API error: {resp.status_code} - {error_message_from(resp)}. Model: {model}"
        )

    @staticmethod
    def extract_text(data: Any) -> str:
        """Pull the answer out of the several response shapes the API returns."""
        if isinstance(data, list) and data:
            first = data[0]
            if isinstance(first, dict):
                if first.get("generated_text"):
                    return str(first["generated_text"]).strip()
                if first.get("label"):
                    return f"{first['label']} ({float(first.get('score') or 0):.2f})"
            elif isinstance(first, str) and first.strip():
                return first.strip()
        elif isinstance(data, dict):
            if data.get("generated_text"):
                return str(data["generated_text"]).strip()
            # zero-shot pipelines answer with parallel label/score lists
            labels = data.get("labels")
            scores = data.get("scores")
            if isinstance(labels, list) and labels and isinstance(scores, list) and scores:
                return f"{labels[0]} ({float(scores[0]):.2f})"
        elif isinstance(data, str) and data.strip():
            return data.strip()

        raise ProviderCallFailed(
            "Unexpected response format from Hugging Face API: " + str(data)[:200]
        )


__all__ = ["HuggingFaceProvider"]
