"""
Shared fixtures: an in-memory file repository and scripted AI providers.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from tabular_insights.ai.config import AIProviderConfig
from tabular_insights.ai.gateway import AIGateway
from tabular_insights.ai.providers import AIProvider, ProviderCallFailed


class InMemoryFileRepository:
    """Implements the FileDataRepository interface over a dict."""

    def __init__(self):
        self.records: Dict[str, Dict[str, Any]] = {}

    async def create(self, owner_id, file_name, original_name, file_type, file_size,
                     data, columns, row_count, is_processed=True) -> dict:
        file_id = str(uuid.uuid4())
        record = {
            "id": file_id,
            "owner_id": owner_id,
            "file_name": file_name,
            "original_name": original_name,
            "file_type": file_type,
            "file_size": file_size,
            "data": data,
            "columns": columns,
            "row_count": row_count,
            "upload_date": datetime.now(timezone.utc),
            "is_processed": is_processed,
        }
        self.records[file_id] = record
        return dict(record)

    async def get_by_id_and_owner(self, file_id: str, owner_id: str) -> Optional[dict]:
        record = self.records.get(file_id)
        if record is None or record["owner_id"] != owner_id:
            return None
        return dict(record)

    async def list_by_owner(self, owner_id: str) -> List[dict]:
        owned = [dict(r) for r in self.records.values() if r["owner_id"] == owner_id]
        return sorted(owned, key=lambda r: r["upload_date"], reverse=True)

    async def delete_by_id_and_owner(self, file_id: str, owner_id: str) -> bool:
        record = self.records.get(file_id)
        if record is None or record["owner_id"] != owner_id:
            return False
        del self.records[file_id]
        return True


class ScriptedProvider(AIProvider):
    """Provider returning a fixed answer, or raising, while recording calls."""

    def __init__(self, name: str, api_key: Optional[str] = "key",
                 answer: str = "", error: Optional[Exception] = None):
        super().__init__(api_key=api_key)
        self.name = name
        self.answer = answer or f"answer from {name}"
        self.error = error
        self.calls: List[Dict[str, Optional[str]]] = []

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt})
        if self.error is not None:
            raise self.error
        return self.answer


def make_gateway(preferred: str = "huggingface", **providers: ScriptedProvider) -> AIGateway:
    """Gateway over scripted providers; missing services get no credential."""
    chain = []
    for name in ("huggingface", "gemini", "openai"):
        chain.append(providers.get(name) or ScriptedProvider(name, api_key=None))
    return AIGateway(AIProviderConfig(preferred_provider=preferred), providers=chain)


@pytest.fixture
def repository():
    return InMemoryFileRepository()


@pytest.fixture
def failing_provider():
    def _make(name: str) -> ScriptedProvider:
        return ScriptedProvider(name, error=ProviderCallFailed(f"{name} is down"))
    return _make
