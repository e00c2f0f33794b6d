"""
Global error handling.

Every error body has the shape {"error": <message>}.
"""

import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.exc import SQLAlchemyError

from shop_insights.utils.logger import get_logger
from shop_insights.utils.exceptions import (
    ShopInsightsError,
    ValidationError,
)

logger = get_logger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request logging and last-resort error conversion.
    """

    async def dispatch(self, request: Request, call_next):
        """Process request with error handling."""
        start_time = time.time()

        try:
            response = await call_next(request)

            duration = time.time() - start_time
            logger.info(
                f"{request.method} {request.url.path} - {response.status_code} - {duration:.3f}s"
            )

            return response

        except SQLAlchemyError as e:
            logger.error(f"SQLAlchemy error: {e}", exc_info=True)
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "A database error occurred")

        except ShopInsightsError as e:
            logger.error(f"Shop Insights error: {e}")
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)

        except Exception as e:
            logger.error(f"Unhandled exception: {e}", exc_info=True)
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    """Render HTTP, validation and domain errors as {"error": ...}."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc}")
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            message = f"Invalid request: {location}: {first.get('msg', 'invalid value')}"
        else:
            message = "Invalid request"
        logger.warning(f"Request validation failed on {request.url.path}: {message}")
        return error_response(status.HTTP_400_BAD_REQUEST, message)
