"""
Pydantic models for API requests.
"""

from typing import Optional

from pydantic import BaseModel, Field


class FileRequest(BaseModel):
    """Request naming one of the caller's stored files."""
    fileId: str = Field(..., min_length=1, description="ID of an uploaded file")


class ChatRequest(FileRequest):
    """Question about a stored file."""
    question: Optional[str] = Field(
        default="",
        description="Natural-language question about the data"
    )
