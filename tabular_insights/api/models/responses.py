"""
Pydantic response models for the API.

Every response is wrapped in a {success, data | message} envelope.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    message: str
    type: str = "error"


class ColumnResponse(BaseModel):
    """Inferred column descriptor."""
    name: str
    type: str


class FileResponse(BaseModel):
    """Stored file as returned right after upload."""
    fileId: str
    fileName: str
    fileType: str
    rowCount: int
    columns: List[ColumnResponse]
    uploadDate: Optional[datetime] = None


class FileListItem(BaseModel):
    """Summary projection used by the file list."""
    fileId: str
    fileName: str
    fileType: str
    rowCount: int
    uploadDate: Optional[datetime] = None
    isProcessed: bool = True


class FileDetailResponse(FileResponse):
    """Stored file with its rows."""
    data: List[Dict[str, Any]] = Field(default_factory=list)


class SummaryResponse(BaseModel):
    fileId: str
    fileName: str
    summaryStats: Dict[str, Any]


class InsightsResponse(BaseModel):
    fileId: str
    fileName: str
    insights: str
    summaryStats: Dict[str, Any]
    generatedAt: str


class ChatResponse(BaseModel):
    fileId: str
    fileName: str
    question: str
    answer: str
    timestamp: str


class UploadEnvelope(BaseModel):
    success: bool = True
    message: str
    data: FileResponse


class FileListEnvelope(BaseModel):
    success: bool = True
    data: List[FileListItem]


class FileDetailEnvelope(BaseModel):
    success: bool = True
    data: FileDetailResponse


class MessageEnvelope(BaseModel):
    success: bool = True
    message: str


class SummaryEnvelope(BaseModel):
    success: bool = True
    data: SummaryResponse


class InsightsEnvelope(BaseModel):
    success: bool = True
    data: InsightsResponse


class ChatEnvelope(BaseModel):
    success: bool = True
    data: ChatResponse
