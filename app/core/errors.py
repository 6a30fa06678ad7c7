"""
Error handling utilities
"""

import traceback
from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.config import config
from app.core.logger import logger


class ErrorResponse(Exception):
    """Custom exception for application errors"""

    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class DatabaseError(ErrorResponse):
    """Store failure surfaced to callers without internal detail"""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        super().__init__("Internal server error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class ErrorResponseModel(BaseModel):
    """Pydantic model for error responses"""
    error: str
    details: Optional[dict] = None


def _request_metadata(request: Request, status_code: int) -> dict:
    return {
        "status_code": status_code,
        "url": str(request.url),
        "method": request.method,
    }


async def error_response_handler(request: Request, exc: ErrorResponse):
    """Handler for custom ErrorResponse exceptions"""
    metadata = {"event": "error_response", **_request_metadata(request, exc.status_code), **exc.details}

    if exc.status_code >= 500:
        if isinstance(exc, DatabaseError):
            metadata["operation"] = exc.operation
        if config.environment == "development":
            metadata["traceback"] = traceback.format_exc()
        logger.error(f"Error: {exc.message}", metadata=metadata)
    else:
        # Client errors, including not-found, are not system faults
        logger.info(f"Request rejected: {exc.message}", metadata=metadata)

    content = {"error": exc.message}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handler for FastAPI HTTPException"""
    logger.info(
        f"HTTPException: {exc.detail}",
        metadata={"event": "http_exception", **_request_metadata(request, exc.status_code)}
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        message = err.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "invalid request"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Map request validation failures to 400 with a readable message"""
    message = _describe_validation_errors(exc)
    logger.info(
        f"Validation error: {message}",
        metadata={"event": "validation_error", **_request_metadata(request, status.HTTP_400_BAD_REQUEST)}
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "invalid request body", "details": {"message": message}},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler: log with detail, answer with an opaque 500"""
    logger.error(
        f"Unhandled error: {exc}",
        error=exc,
        metadata={
            "event": "unhandled_exception",
            **_request_metadata(request, status.HTTP_500_INTERNAL_SERVER_ERROR),
            "traceback": traceback.format_exc(),
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )
