"""
FastAPI application entry point for the sample backend.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sample_backend.config import Settings, get_settings
from sample_backend.db import Database
from sample_backend.errors import ApiError
from sample_backend.routes import router

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND = "API route not found."
INVALID_BODY = "Invalid request body."
INTERNAL_ERROR = "Internal server error."


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        # An unknown path and a known path with the wrong verb are both unmatched routes.
        if exc.status_code in (404, 405):
            return error_response(404, ROUTE_NOT_FOUND)
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return error_response(422, INVALID_BODY)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(500, INTERNAL_ERROR)


def create_app(
    settings: Optional[Settings] = None, database: Optional[Database] = None
) -> FastAPI:
    """
    Build the application. A ``database`` may be injected (tests pass an
    in-memory one); otherwise the configured SQLite file is opened. Schema
    creation and seeding run once here.
    """
    settings = settings or get_settings()
    database = database or Database.from_settings(settings)
    database.bootstrap()

    app = FastAPI(title="Sample Backend (FastAPI)", version="0.1.0")
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)
    return app
