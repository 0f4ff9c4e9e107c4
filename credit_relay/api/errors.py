"""Uniform mapping from failures to HTTP status and {"error": ...} bodies"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from credit_relay.api.dependencies import get_request_id
from credit_relay.domain.exceptions import (
    ChainCallError,
    ChainTimeout,
    ConfigurationError,
    DomainException,
    NotFound,
    StoreUnavailable,
    Unauthorized,
    ValidationError,
)

# (status, public message); None means the exception text is safe to return.
# Only role and confirmation failures get their own status; every other
# downstream failure is a 500 with a generic message.
ERROR_MAP = [
    (ValidationError, 400, None),
    (Unauthorized, 403, "Signer is not authorized for this operation"),
    (NotFound, 500, "Metadata not found"),
    (ChainCallError, 500, "Blockchain call failed"),
    (StoreUnavailable, 500, "Metadata store unavailable"),
    (ChainTimeout, 504, "Transaction was not confirmed in time"),
    (ConfigurationError, 500, "Service is not configured for this operation"),
]


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    request_id = get_request_id(request)
    for exc_type, status_code, message in ERROR_MAP:
        if isinstance(exc, exc_type):
            level = logging.WARNING if status_code < 500 else logging.ERROR
            logging.log(level, f"{type(exc).__name__}: {exc}", extra={"request_id": request_id})
            return _error(status_code, message or str(exc))

    logging.error(f"Unhandled domain error: {exc}", extra={"request_id": request_id})
    return _error(500, "Internal server error")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logging.warning(f"Rejected request: {errors}", extra={"request_id": get_request_id(request)})
    if any(error.get("type") == "missing" for error in errors):
        return _error(400, "Missing required fields")
    fields = sorted({".".join(str(part) for part in error.get("loc", ())[1:]) for error in errors})
    return _error(400, f"Invalid fields: {', '.join(fields)}")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.error(f"Unexpected error: {exc}", extra={"request_id": get_request_id(request)})
    return _error(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
