"""
AI insight, summary and chat API routes.
"""

from fastapi import APIRouter, Depends

from tabular_insights.api.dependencies import get_current_user_id, get_insight_service
from tabular_insights.api.models.requests import ChatRequest, FileRequest
from tabular_insights.api.models.responses import (
    ChatEnvelope,
    InsightsEnvelope,
    SummaryEnvelope,
)
from tabular_insights.services.insight_service import InsightService

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/insights", response_model=InsightsEnvelope)
async def generate_insights(
    request: FileRequest,
    user_id: str = Depends(get_current_user_id),
    service: InsightService = Depends(get_insight_service),
):
    """
    Generate AI insights from a file's summary statistics.
    """
    data = await service.generate_insights(request.fileId, user_id)
    return {"success": True, "data": data}


@router.post("/summary", response_model=SummaryEnvelope)
async def summarize(
    request: FileRequest,
    user_id: str = Depends(get_current_user_id),
    service: InsightService = Depends(get_insight_service),
):
    """
    Summary statistics only; no AI provider is called.
    """
    data = await service.summarize_only(request.fileId, user_id)
    return {"success": True, "data": data}


@router.post("/chat", response_model=ChatEnvelope)
async def chat(
    request: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    service: InsightService = Depends(get_insight_service),
):
    """
    Ask a question about a file's data.
    """
    data = await service.chat(request.fileId, user_id, request.question)
    return {"success": True, "data": data}
