"""Middleware configuration for the REST API.

This module sets up middleware for request logging and error handling.
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from nursecare.domain.ports import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Log request and response details.

        Parameters:
            request: Incoming HTTP request
            call_next: Next middleware or route handler

        Returns:
            Response: HTTP response with X-Process-Time header
        """
        start_time = time.time()
        context = {
            "request_id": request.headers.get("X-Request-ID", str(uuid.uuid4())),
            "method": request.method,
            "client_ip": request.client.host if request.client else "unknown",
            "endpoint": request.url.path,
            "user_id": request.headers.get("X-User-Id"),
        }

        logger.info(f"{request.method} {request.url.path}", extra=context)

        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Process-Time"] = f"{process_time:.3f}"

        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.3f}s",
            extra=context
        )

        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware mapping NurseCare exceptions to HTTP responses.

    ValidationError / ValueError -> 400, NotFoundError -> 404,
    StorageError and anything else -> 500.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Handle errors globally.

        Parameters:
            request: Incoming HTTP request
            call_next: Next middleware or route handler

        Returns:
            Response: HTTP response with error details if exception occurred
        """
        try:
            return await call_next(request)
        except NotFoundError as e:
            return JSONResponse(
                status_code=404,
                content={"error": "Not Found", "detail": str(e)}
            )
        except ValidationError as e:
            logger.warning(f"Validation error: {str(e)}")
            return JSONResponse(
                status_code=400,
                content={"error": "Bad Request", "detail": str(e), "field": e.field}
            )
        except PydanticValidationError as e:
            logger.warning(f"Validation error: {str(e)}")
            return JSONResponse(
                status_code=400,
                content={
                    "error": "Bad Request",
                    "detail": [
                        {"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()
                    ],
                }
            )
        except ValueError as e:
            logger.warning(f"Validation error: {str(e)}")
            return JSONResponse(
                status_code=400,
                content={"error": "Bad Request", "detail": str(e)}
            )
        except StorageError as e:
            logger.error(f"Storage error during {e.operation}: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "detail": "Storage operation failed"}
            )
        except Exception as e:
            logger.error(f"Unexpected error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "detail": "An unexpected error occurred. Please check logs for details."
                }
            )


def setup_middleware(app) -> None:
    """Setup application middleware.

    Parameters:
        app: FastAPI application instance

    Middleware Order:
        1. ErrorHandlingMiddleware - Maps exceptions to responses
        2. LoggingMiddleware - Logs requests/responses, outermost
    """
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
