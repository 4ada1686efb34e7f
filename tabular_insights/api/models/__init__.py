"""
Pydantic models for API requests and responses.
"""

from tabular_insights.api.models.requests import ChatRequest, FileRequest
from tabular_insights.api.models.responses import (
    ChatEnvelope,
    ChatResponse,
    ColumnResponse,
    ErrorResponse,
    FileDetailEnvelope,
    FileDetailResponse,
    FileListEnvelope,
    FileListItem,
    FileResponse,
    InsightsEnvelope,
    InsightsResponse,
    MessageEnvelope,
    SummaryEnvelope,
    SummaryResponse,
    UploadEnvelope,
)

__all__ = [
    # Requests
    "ChatRequest",
    "FileRequest",
    # Responses
    "ChatEnvelope",
    "ChatResponse",
    "ColumnResponse",
    "ErrorResponse",
    "FileDetailEnvelope",
    "FileDetailResponse",
    "FileListEnvelope",
    "FileListItem",
    "FileResponse",
    "InsightsEnvelope",
    "InsightsResponse",
    "MessageEnvelope",
    "SummaryEnvelope",
    "SummaryResponse",
    "UploadEnvelope",
]
