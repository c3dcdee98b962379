"""API error handling and response helpers."""

import logging
from typing import Any, Dict

from fastapi import Request, status
from fastapi.responses import JSONResponse

from autofee.services.errors import (
    AutofeeError,
    NotFoundError,
    PreconditionError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first: NotFoundError is also a ValidationError
ERROR_STATUS = [
    (NotFoundError, status.HTTP_404_NOT_FOUND, "not_found"),
    (ValidationError, 422, "validation_error"),
    (PreconditionError, status.HTTP_409_CONFLICT, "precondition_failed"),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR, "storage_error"),
]


def classify_error(error: AutofeeError) -> tuple[int, str]:
    """Map a domain error to (http_status, error code)."""
    for error_type, http_status, code in ERROR_STATUS:
        if isinstance(error, error_type):
            return http_status, code
    return status.HTTP_400_BAD_REQUEST, "error"


def error_response(error: AutofeeError) -> Dict[str, Any]:
    """Create a standardized error response."""
    _, code = classify_error(error)
    return {"error": code, "detail": str(error)}


async def autofee_error_handler(request: Request, error: AutofeeError) -> JSONResponse:
    """Turn domain errors raised by services into JSON error responses."""
    http_status, code = classify_error(error)
    if http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {error}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({code}): {error}")
    return JSONResponse(status_code=http_status, content=error_response(error))
