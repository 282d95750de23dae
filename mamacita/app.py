"""
FastAPI application entry point for the Mamacita API.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from mamacita.config import get_settings
from mamacita.dependencies import build_rate_limiter
from mamacita.errors import ApiError, InternalError, NotFound, RateLimited, ValidationError
from mamacita.messages import msg
from mamacita.routes import router

logger = logging.getLogger(__name__)


def error_response(exc: ApiError, headers: dict | None = None) -> JSONResponse:
    include_details = get_settings().is_development
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.message,
            "error": exc.to_dict(include_details=include_details),
        },
        headers=headers,
    )


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc)


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    missing = [_field_name(e["loc"]) for e in errors if e.get("type") == "missing"]
    if missing:
        message = msg("missing_fields", fields=", ".join(missing))
    else:
        message = msg("invalid_fields", fields=", ".join(_field_name(e["loc"]) for e in errors))
    details = [
        {"field": _field_name(e["loc"]), "message": e.get("msg"), "type": e.get("type")}
        for e in errors
    ]
    return error_response(ValidationError(message, details=details))


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(
            NotFound(msg("route_not_found"), details={"path": request.url.path})
        )
    error = ApiError(str(exc.detail))
    error.status_code = exc.status_code
    error.code = "HTTP_ERROR"
    return error_response(error, headers=getattr(exc, "headers", None))


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Database error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return error_response(InternalError(msg("internal_error"), details=str(exc)))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return error_response(InternalError(msg("internal_error"), details=str(exc)))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Mamacita API", version="1.0.0")
    app.state.rate_limiter = build_rate_limiter()

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        if not request.url.path.startswith(settings.api_prefix):
            return await call_next(request)
        client = request.client.host if request.client else "unknown"
        state = await run_in_threadpool(request.app.state.rate_limiter.hit, client)
        headers = {
            "RateLimit-Limit": str(state.limit),
            "RateLimit-Remaining": str(state.remaining),
            "RateLimit-Reset": str(max(0, state.reset_in_ms) // 1000),
        }
        if state.exceeded:
            logger.warning("Rate limit exceeded for %s", client)
            return error_response(RateLimited(msg("rate_limited")), headers=headers)
        response = await call_next(request)
        response.headers.update(headers)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health")
    def health():
        return {
            "success": True,
            "message": msg("api_running"),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
        }

    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
