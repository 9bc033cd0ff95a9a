"""Exception handlers rendering storefront failures as ``{"error": ...}``."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.exceptions import (
    ContactNotFound,
    OrderNotFound,
    PaymentGatewayError,
    RefundFailed,
    StatusUpdateFailed,
)

logger = structlog.get_logger(__name__)


def first_message(messages) -> str:
    """Flatten Protean's ``{"field": ["message", ...]}`` into one message."""
    if isinstance(messages, dict):
        for value in messages.values():
            return first_message(value)
    if isinstance(messages, list | tuple) and messages:
        return first_message(messages[0])
    return str(messages) if messages else "Invalid request"


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


async def _validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, first_message(exc.messages))


async def _request_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        return _error(400, f"Invalid {location}: {errors[0].get('msg')}" if location else errors[0].get("msg"))
    return _error(400, "Invalid request")


async def _not_found(_request: Request, exc: Exception) -> JSONResponse:
    message = str(exc) if isinstance(exc, OrderNotFound | ContactNotFound) else "Not found"
    return _error(404, message)


async def _refund_failed(_request: Request, exc: RefundFailed) -> JSONResponse:
    return _error(502, str(exc), reason=exc.reason)


async def _gateway_error(_request: Request, exc: PaymentGatewayError) -> JSONResponse:
    return _error(502, str(exc) or "Payment gateway error")


async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    return _error(500, "Internal server error")


async def _status_update_failed(_request: Request, exc: StatusUpdateFailed) -> JSONResponse:
    return _error(500, str(exc), status=exc.previous_status)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(OrderNotFound, _not_found)
    app.add_exception_handler(ContactNotFound, _not_found)
    app.add_exception_handler(RefundFailed, _refund_failed)
    app.add_exception_handler(PaymentGatewayError, _gateway_error)
    app.add_exception_handler(StatusUpdateFailed, _status_update_failed)
    app.add_exception_handler(Exception, _unexpected)
