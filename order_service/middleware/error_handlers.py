import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from order_service.config import settings
from order_service.exceptions import InternalError, OrderServiceError
from order_service.middleware.correlation_id import get_correlation_id
from order_service.schemas.orders_schemas import ErrorResponse

logger = logging.getLogger(__name__)


def _error_response(status_code: int, status: str, details: str) -> JSONResponse:
    body = ErrorResponse(status=status, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def handle_order_service_error(request: Request, exc: OrderServiceError):
    extra = {"correlation_id": get_correlation_id(request)}
    if isinstance(exc, InternalError):
        logger.error(f"{type(exc).__name__} code={exc.code}: {exc.message}", extra=extra)
    else:
        logger.info(f"{type(exc).__name__} code={exc.code}: {exc.message}", extra=extra)
    return _error_response(exc.status_code, exc.status_name, exc.details)


async def handle_validation_error(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    logger.info(f"RequestValidationError: {problems}", extra={"correlation_id": get_correlation_id(request)})
    return _error_response(400, "BAD_REQUEST", problems)


async def handle_unexpected_error(request: Request, exc: Exception):
    # runs outside the middleware stack, so the correlation header is set here
    correlation_id = get_correlation_id(request)
    logger.error(
        f"Unhandled {type(exc).__name__}: {exc}",
        exc_info=exc,
        extra={"correlation_id": correlation_id},
    )
    error = InternalError("ERROR_UNEXPECTED", "Unexpected error", "Exception")
    response = _error_response(error.status_code, error.status_name, error.details)
    if correlation_id != "-":
        response.headers[settings.correlation_id_header] = correlation_id
    return response


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(OrderServiceError, handle_order_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
