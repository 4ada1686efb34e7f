"""
Shared dependencies for FastAPI routes.

Provides:
- The authenticated user id
- Repository / service construction per request
- The AI gateway built from settings
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tabular_insights.ai.gateway import AIGateway
from tabular_insights.core.config import Settings, get_settings
from tabular_insights.services.file_service import FileService
from tabular_insights.services.insight_service import InsightService
from tabular_insights.storage.postgres.connection import get_db_session
from tabular_insights.storage.postgres.repositories import FileDataRepository

logger = logging.getLogger(__name__)


async def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
) -> str:
    """
    Identify the caller.

    Authentication happens upstream; the gateway forwards the user id in the
    X-User-Id header.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_user_id.strip()


def get_file_repository(
    session: AsyncSession = Depends(get_db_session),
) -> FileDataRepository:
    return FileDataRepository(session)


def get_ai_gateway(settings: Settings = Depends(get_settings)) -> AIGateway:
    return AIGateway(settings.ai_provider_config())


def get_file_service(
    repository: FileDataRepository = Depends(get_file_repository),
    settings: Settings = Depends(get_settings),
) -> FileService:
    return FileService(repository, upload_dir=settings.upload_tmp_dir)


def get_insight_service(
    repository: FileDataRepository = Depends(get_file_repository),
    gateway: AIGateway = Depends(get_ai_gateway),
) -> InsightService:
    return InsightService(repository, gateway)
