#!/usr/bin/env python3
"""
Error handlers for the web application.

Matching errors keep a consistent JSON body:
    {"success": false, "error": "...", "type": "<ExceptionClass>"}
"""

import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.exceptions import MatchingError, NotFoundError, InvalidStateError, MatchConflictError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "type": error_type
        }
    )


async def matching_exception_handler(
    request: Request,
    exc: MatchingError
) -> JSONResponse:
    """
    Map matching engine errors to HTTP status codes.

    NotFoundError -> 404, InvalidStateError -> 400, MatchConflictError -> 409,
    anything else -> 500.
    """
    status_code = 500
    if isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, InvalidStateError):
        status_code = 400
    elif isinstance(exc, MatchConflictError):
        status_code = 409

    if status_code >= 500:
        logger.error(f"Matching error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"Rejected {request.method} {request.url.path}: {exc}")

    return _error_response(status_code, str(exc), exc.__class__.__name__)


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """Handle FastAPI HTTP exceptions with consistent format."""
    return _error_response(exc.status_code, exc.detail, "HTTPException")


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error in {request.url.path}")
    return _error_response(500, "Internal server error", "InternalError")
