"""
Maps control errors to HTTP responses wrapped in the API envelope.
"""
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ....common.exceptions import (
    ControlError, DuplicateIntersectionError, IntersectionNotFoundError,
    InvalidConfigurationError, InvalidOperationError, SignalConflictError
)
from ....common.logging import setup_logger
from ....common.schemas import ApiResponse

logger = setup_logger(__name__)

STATUS_CODES = {
    IntersectionNotFoundError: 404,
    DuplicateIntersectionError: 409,
    SignalConflictError: 409,
    InvalidConfigurationError: 400,
    InvalidOperationError: 400,
}

VALIDATION_STATUS_CODE = 422

# Request sections dropped from a field path ("body.id" -> "id")
_LOCATION_ROOTS = {"body", "path", "query", "header", "cookie"}

def _error_response(status_code: int, message: str, data: Optional[Any] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.error(message, data).model_dump(mode="json")
    )

def validation_field_errors(errors) -> Dict[str, str]:
    """Flattens pydantic errors into {dotted.field: message}; the first message per field wins."""
    fields: Dict[str, str] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _LOCATION_ROOTS:
            loc = loc[1:]
        fields.setdefault(".".join(loc) or "request", error.get("msg", "Invalid value"))
    return fields

async def handle_control_error(request: Request, exc: ControlError) -> JSONResponse:
    status_code = STATUS_CODES.get(type(exc), 400)
    logger.warning(f"{type(exc).__name__}: {exc}")
    return _error_response(status_code, str(exc))

async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = validation_field_errors(exc.errors())
    logger.warning(f"Validation failed for {request.method} {request.url.path}: {fields}")
    return _error_response(VALIDATION_STATUS_CODE, "Validation failed", fields)

async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unexpected error occurred", exc_info=exc)
    return _error_response(500, f"An unexpected error occurred: {exc}")

def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ControlError, handle_control_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
