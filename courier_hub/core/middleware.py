# courier_hub/core/middleware.py
import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from courier_hub.config.settings import settings
from courier_hub.core.errors import ErrorKind, ServiceError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str, kind: ErrorKind, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "error_code": kind.value},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI):
    """Single boundary translator: error kind -> status code + {"error": message}"""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if exc.kind == ErrorKind.INTERNAL:
            logger.error(f"{request.method} {request.url.path} - internal error: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if exc.kind == ErrorKind.UNAUTHENTICATED else None
        return _error_response(exc.status_code, exc.message, exc.kind, headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "Invalid input"))
        return _error_response(400, message, ErrorKind.INVALID_INPUT)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        kind = {
            401: ErrorKind.UNAUTHENTICATED,
            403: ErrorKind.FORBIDDEN,
            404: ErrorKind.NOT_FOUND,
            409: ErrorKind.CONFLICT,
        }.get(exc.status_code, ErrorKind.INVALID_INPUT if exc.status_code < 500 else ErrorKind.INTERNAL)
        return _error_response(exc.status_code, str(exc.detail), kind, getattr(exc, "headers", None))

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Storage failure on {request.method} {request.url.path}")
        return _error_response(500, "Storage failure", ErrorKind.INTERNAL)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(500, "Internal server error", ErrorKind.INTERNAL)


def setup_middleware(app: FastAPI):
    """Configure all middleware for the application"""

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        return response

    register_exception_handlers(app)
