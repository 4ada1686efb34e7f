"""
Insight / chat orchestration over stored tables.

Combines summary statistics (and a sample-row preview for chat) into
prompts and forwards them to the AI gateway.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from tabular_insights.ai.gateway import DEFAULT_SYSTEM_PROMPT, AIGateway
from tabular_insights.analysis.summary_stats import (
    format_sample_rows,
    format_stats_for_ai,
    generate_summary_stats,
)
from tabular_insights.api.exceptions import (
    InvalidInputError,
    NoProviderConfiguredError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

CHAT_SYSTEM_PROMPT = (
    "You are a helpful data analyst assistant. Answer questions about data clearly "
    "and accurately based on the provided data summary. Try to answer the question "
    "in a way that is easy to understand and follow and in a single sentence."
)

INSIGHTS_PROMPT_TEMPLATE = """Analyze the following data summary and provide key insights, patterns, and trends.

{stats_text}

Please provide:
1. Key insights and observations about the data
2. Notable patterns or trends you've identified
3. Potential outliers or anomalies
4. Recommendations for further analysis

Format your response in a clear, concise manner with bullet points where appropriate."""

CHAT_PROMPT_TEMPLATE = """You are a data analyst assistant. Based on the following data summary and sample data, answer the user's question accurately and helpfully.

{stats_text}{sample_text}

User Question: {question}

Please analyze the data and provide a clear, concise answer to the question. If the question asks about specific values (like revenue for a particular year), analyze the sample data provided. If the question cannot be answered from the provided data, please explain what information is available and what might be needed to answer the question."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_insights_prompt(stats_text: str) -> str:
    return INSIGHTS_PROMPT_TEMPLATE.format(stats_text=stats_text)


def build_chat_prompt(stats_text: str, sample_text: str, question: str) -> str:
    sample_block = f"\n\n{sample_text}" if sample_text else ""
    return CHAT_PROMPT_TEMPLATE.format(
        stats_text=stats_text.rstrip("\n"),
        sample_text=sample_block,
        question=question,
    )


class InsightService:
    """summarize_only / generate_insights / chat on a user's stored table."""

    def __init__(self, repository, gateway: AIGateway):
        self.repository = repository
        self.gateway = gateway

    async def _load(self, file_id: str, owner_id: str) -> Dict[str, Any]:
        if not file_id:
            raise InvalidInputError("File ID is required", field="fileId")
        record = await self.repository.get_by_id_and_owner(file_id, owner_id)
        if not record:
            raise NotFoundError("File", file_id)
        return record

    def _require_provider(self) -> None:
        if not self.gateway.is_configured:
            raise NoProviderConfiguredError()

    async def summarize_only(self, file_id: str, owner_id: str) -> Dict[str, Any]:
        """Summary statistics without any AI call."""
        record = await self._load(file_id, owner_id)
        summary_stats = generate_summary_stats(record["data"], record["columns"])
        return {
            "fileId": record["id"],
            "fileName": record["original_name"],
            "summaryStats": summary_stats,
        }

    async def generate_insights(self, file_id: str, owner_id: str) -> Dict[str, Any]:
        """Ask the AI gateway for insights on the table's summary statistics."""
        self._require_provider()
        record = await self._load(file_id, owner_id)

        summary_stats = generate_summary_stats(record["data"], record["columns"])
        prompt = build_insights_prompt(format_stats_for_ai(summary_stats))

        logger.info(f"Generating insights for file {record['id']}")
        insights = await self.gateway.generate(prompt, DEFAULT_SYSTEM_PROMPT)

        return {
            "fileId": record["id"],
            "fileName": record["original_name"],
            "insights": insights,
            "summaryStats": {
                "rowCount": summary_stats["rowCount"],
                "columnCount": summary_stats["columnCount"],
                "columns": summary_stats["columns"],
            },
            "generatedAt": _now_iso(),
        }

    async def chat(self, file_id: str, owner_id: str, question: str) -> Dict[str, Any]:
        """Answer a natural-language question about the table."""
        question = (question or "").strip()
        if not question:
            raise InvalidInputError("Question is required", field="question")

        self._require_provider()
        record = await self._load(file_id, owner_id)

        rows = record["data"] or []
        columns = record["columns"]
        summary_stats = generate_summary_stats(rows, columns)
        prompt = build_chat_prompt(
            format_stats_for_ai(summary_stats),
            format_sample_rows(rows, columns),
            question,
        )

        logger.info(f"Answering chat question for file {record['id']}")
        answer = await self.gateway.generate(prompt, CHAT_SYSTEM_PROMPT)

        return {
            "fileId": record["id"],
            "fileName": record["original_name"],
            "question": question,
            "answer": answer,
            "timestamp": _now_iso(),
        }
