"""
Consolidated middleware for the SnapCal storage API
"""

import time
import logging
from datetime import datetime
from uuid import uuid4

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.exceptions import (
    ConfigurationError,
    MigrationError,
    NotFoundError,
    ServiceValidationError,
    StorageError,
    UnauthorizedError,
)

logger = logging.getLogger("snapcal.middleware")


# ============================================================================
# Helper Functions
# ============================================================================


def error_body(code: str, message: str, details=None, **extra) -> dict:
    """Standard error envelope shared by every handler"""
    error = {"code": code, "message": message}
    if details:
        error["details"] = jsonable_encoder(details)
    error.update(extra)
    return {
        "success": False,
        "error": error,
        "timestamp": datetime.utcnow().isoformat(),
    }


# ============================================================================
# Request Logging Middleware
# ============================================================================


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all HTTP requests and responses"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id

        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "url": str(request.url),
                "client": request.client.host if request.client else None,
            },
        )

        start_time = time.time()

        try:
            response: Response = await call_next(request)
            process_time = time.time() - start_time

            logger.info(
                "Request completed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "url": str(request.url),
                    "status_code": response.status_code,
                    "process_time": f"{process_time:.4f}s",
                },
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{process_time:.4f}"

            return response

        except Exception as exc:
            process_time = time.time() - start_time
            logger.error(
                "Request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "url": str(request.url),
                    "error": str(exc),
                    "process_time": f"{process_time:.4f}s",
                },
                exc_info=True,
            )
            raise


# ============================================================================
# Error Handlers
# ============================================================================


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    logger.warning(f"Validation error on {request.url}: {exc.errors()}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=error_body("VALIDATION_ERROR", "Request validation failed", exc.errors()),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions"""
    logger.warning(f"HTTP {exc.status_code} on {request.url}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(f"HTTP_{exc.status_code}", exc.detail),
    )


async def service_validation_exception_handler(
    request: Request, exc: ServiceValidationError
):
    """Handle service validation errors"""
    logger.warning(f"Service validation error on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=exc.http_status,
        content=error_body("SERVICE_VALIDATION_ERROR", exc.message, exc.details),
    )


async def not_found_exception_handler(request: Request, exc: NotFoundError):
    """Handle not found errors"""
    logger.warning(f"Resource not found on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=exc.http_status,
        content=error_body("NOT_FOUND", exc.message, exc.details),
    )


async def unauthorized_exception_handler(request: Request, exc: UnauthorizedError):
    """Handle calls that need a signed-in user"""
    logger.warning(f"Unauthorized on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=exc.http_status,
        content=error_body("UNAUTHORIZED", exc.message, exc.details),
    )


async def configuration_exception_handler(request: Request, exc: ConfigurationError):
    """Handle operations not allowed in the current backend or state"""
    logger.warning(f"Configuration error on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=exc.http_status,
        content=error_body((exc.code or "error").upper(), exc.message, exc.details),
    )


async def storage_exception_handler(request: Request, exc: StorageError):
    """Handle backend failures; the body tells the caller whether a retry can help"""
    logger.error(f"Storage error on {request.url}: {exc.code}: {exc.message}")

    return JSONResponse(
        status_code=exc.http_status,
        content=error_body(
            exc.code.upper(), exc.message, exc.details, retryable=exc.retryable
        ),
    )


async def migration_exception_handler(request: Request, exc: MigrationError):
    """Handle a failed local-to-remote sync; local data is still intact"""
    logger.error(f"Migration error on {request.url}: {exc.message}")

    return JSONResponse(
        status_code=exc.http_status,
        content=error_body((exc.code or "error").upper(), exc.message, exc.details),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.exception(f"Unexpected error on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
    )
