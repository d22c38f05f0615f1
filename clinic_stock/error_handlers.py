"""Custom error handlers and exceptions for the application."""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from typing import Union
import uuid

from clinic_stock.logging_config import get_logger

logger = get_logger("error_handlers")


class AppException(Exception):
    """Base exception for application-specific errors."""

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(AppException):
    """Raised when a stock item, issuance or order id does not resolve."""

    def __init__(self, resource: str, identifier: Union[uuid.UUID, str]):
        super().__init__(
            message=f"{resource} with identifier '{identifier}' not found",
            status_code=404,
            details={"resource": resource, "identifier": str(identifier)}
        )


class InsufficientStockError(AppException):
    """Raised when a decrement would drive a stock item below zero."""

    def __init__(self, available: int, requested: int, item_id: Union[uuid.UUID, str, None] = None):
        self.available = available
        self.requested = requested
        details = {"available": available, "requested": requested}
        if item_id is not None:
            details["stock_item_id"] = str(item_id)
        super().__init__(
            message=f"Insufficient stock. Available: {available}, Requested: {requested}",
            status_code=409,
            details=details
        )


class AlreadyProcessedError(AppException):
    """Raised when a record has already left the state an operation needs."""

    def __init__(self, resource: str, identifier: Union[uuid.UUID, str], current_status: str):
        self.current_status = current_status
        super().__init__(
            message=f"{resource} '{identifier}' is already {current_status}",
            status_code=409,
            details={"resource": resource, "identifier": str(identifier), "status": current_status}
        )


class StockItemInUseError(AppException):
    """Raised when deleting a stock item that still has history or issuances."""

    def __init__(self, item_id: Union[uuid.UUID, str]):
        super().__init__(
            message="Cannot delete stock item that has ledger history or issuances",
            status_code=409,
            details={"stock_item_id": str(item_id)}
        )


class DuplicateResourceError(AppException):
    """Raised when attempting to create a duplicate resource."""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            message=f"{resource} with {field} '{value}' already exists",
            status_code=409,
            details={"resource": resource, "field": field, "value": value}
        )


class ValidationError(AppException):
    """Raised when data validation fails before any mutation."""

    def __init__(self, message: str, errors: list = None):
        super().__init__(
            message=message,
            status_code=422,
            details={"validation_errors": errors or []}
        )


def error_response(request: Request, status_code: int, error: str, details: dict = None) -> JSONResponse:
    """Build the JSON error body shared by every handler."""
    content = {
        "error": error,
        "details": details or {},
        "path": request.url.path
    }
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=content)


async def app_exception_handler(request: Request, exc: AppException):
    log = logger.warning if exc.status_code < 500 else logger.error
    log(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message} {exc.details}")
    return error_response(request, exc.status_code, exc.message, exc.details)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Flatten pydantic errors into field/message pairs."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"]
        }
        for error in exc.errors()
    ]
    logger.warning(f"Rejected {request.method} {request.url.path}: {errors}")
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation failed",
        {"validation_errors": errors}
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """
    Map database failures to HTTP errors.

    Integrity violations are conflicts: a unique batch or document number
    taken by a concurrent writer, or a quantity CHECK constraint tripped.
    Anything else is a 500 and the session is rolled back by its owner.
    """
    if isinstance(exc, IntegrityError):
        logger.warning(f"Integrity violation on {request.method} {request.url.path}: {exc.orig}")
        return error_response(
            request,
            status.HTTP_409_CONFLICT,
            "Data integrity constraint violated",
            {"reason": str(exc.orig)}
        )

    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error occurred")


async def generic_exception_handler(request: Request, exc: Exception):
    logger.critical(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}",
        exc_info=True
    )
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
