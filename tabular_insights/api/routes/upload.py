"""
File upload API routes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from tabular_insights.api.dependencies import get_current_user_id, get_file_service
from tabular_insights.api.exceptions import ValidationError
from tabular_insights.api.models.responses import (
    FileDetailEnvelope,
    FileListEnvelope,
    MessageEnvelope,
    UploadEnvelope,
)
from tabular_insights.core.config import Settings, get_settings
from tabular_insights.services.file_service import FileService

router = APIRouter(prefix="/upload", tags=["files"])


@router.post("/upload", response_model=UploadEnvelope, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: Optional[UploadFile] = File(default=None),
    user_id: str = Depends(get_current_user_id),
    service: FileService = Depends(get_file_service),
    settings: Settings = Depends(get_settings),
):
    """
    Upload a file (CSV, XLSX or XLS).

    The file is parsed into rows, column types are inferred and the
    result is stored for the calling user.
    """
    if file is None or not file.filename:
        raise ValidationError("No file uploaded", field="file")

    content = await file.read()
    if len(content) > settings.max_file_size_bytes:
        raise ValidationError(
            f"File too large. Maximum size is {settings.max_file_size_mb}MB",
            field="file",
        )

    data = await service.ingest_upload(user_id, file.filename, content)
    return {
        "success": True,
        "message": "File uploaded and processed successfully",
        "data": data,
    }


@router.get("/files", response_model=FileListEnvelope)
async def list_files(
    user_id: str = Depends(get_current_user_id),
    service: FileService = Depends(get_file_service),
):
    """
    List the caller's files, newest first.
    """
    return {"success": True, "data": await service.list_files(user_id)}


@router.get("/files/{file_id}", response_model=FileDetailEnvelope)
async def get_file(
    file_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FileService = Depends(get_file_service),
):
    """
    Get a file with its rows.
    """
    return {"success": True, "data": await service.get_file(file_id, user_id)}


@router.delete("/files/{file_id}", response_model=MessageEnvelope)
async def delete_file(
    file_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FileService = Depends(get_file_service),
):
    await service.delete_file(file_id, user_id)
    return {"success": True, "message": "File deleted successfully"}
