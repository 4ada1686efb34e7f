"""
Custom exceptions and error handling for the API.
"""

import logging
import traceback
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base API exception."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type: str = "api_error",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details or {}
        super().__init__(message)


class NotFoundError(APIError):
    """Resource not found (or not owned by the caller)."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            error_type="not_found",
            details={"resource": resource, "identifier": identifier},
        )


class ValidationError(APIError):
    """Missing or invalid request input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_type="validation_error",
            details=details,
        )


InvalidInputError = ValidationError


class UnsupportedFormatError(APIError):
    """Uploaded file extension is not csv, xlsx or xls."""

    def __init__(self, file_type: str):
        super().__init__(
            message="Unsupported file type",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_type="unsupported_format",
            details={"file_type": file_type},
        )


class ParseError(APIError):
    """Source file is missing, unreadable or malformed."""

    def __init__(self, message: str):
        super().__init__(
            message=f"Error processing file: {message}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="parse_error",
        )


class InvalidColumnSchemaError(APIError):
    """Column descriptors failed the pre-persistence consistency check."""

    def __init__(self, message: str, index: Optional[int] = None):
        details = {"index": index} if index is not None else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="invalid_column_schema",
            details=details,
        )


class NoProviderConfiguredError(APIError):
    """No AI provider credential is configured."""

    def __init__(self):
        super().__init__(
            message=(
                "No AI provider is configured. Please set at least one of: "
                "HUGGINGFACE_API_KEY, GEMINI_API_KEY, or OPENAI_API_KEY"
            ),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="no_provider_configured",
        )


class AllProvidersFailedError(APIError):
    """Every credentialed AI provider was attempted and failed."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        attempted: List[str] = list(errors)
        super().__init__(
            message=(
                "Error calling AI API: all configured AI providers failed "
                f"({', '.join(attempted)}). Please check your API keys and try again."
            ),
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_type="all_providers_failed",
            details={"errors": errors},
        )


def _include_debug(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return settings is not None and not settings.is_production


def create_error_response(exc: APIError, debug: bool = False) -> JSONResponse:
    """Create a JSON envelope from an API error."""
    content: Dict[str, Any] = {
        "success": False,
        "message": exc.message,
        "type": exc.error_type,
    }
    if debug and exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error_type}: {exc.message}")
    else:
        logger.info(f"{exc.error_type}: {exc.message}")
    return create_error_response(exc, debug=_include_debug(request))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions."""
    logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

    content: Dict[str, Any] = {
        "success": False,
        "message": "Internal server error",
        "type": "internal_error",
    }
    if _include_debug(request):
        content["error"] = str(exc)
        content["traceback"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTPException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.detail,
            "type": "http_error",
        },
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body/query validation failures in the response envelope."""
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg')}" if field else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": message,
            "type": "validation_error",
        },
    )


def register_exception_handlers(app):
    """Register all exception handlers with the app."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
