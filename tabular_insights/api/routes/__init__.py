"""
API routes.

Aggregates all route modules into a single router mounted under /api.
"""

from fastapi import APIRouter

from tabular_insights.api.models.responses import ErrorResponse
from tabular_insights.api.routes import ai, upload

router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        401: {"model": ErrorResponse, "description": "Missing caller identity"},
        404: {"model": ErrorResponse, "description": "File not found"},
        500: {"model": ErrorResponse, "description": "Processing failed"},
        502: {"model": ErrorResponse, "description": "No AI provider answered"},
    }
)
router.include_router(upload.router)
router.include_router(ai.router)

__all__ = ["router"]
