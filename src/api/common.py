"""
Pieces shared by the CRM and admin apps: request logging, database error
mapping and the health check.
"""

import time

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError

from src.core.database import Database
from src.core.logging import get_logger

logger = get_logger(__name__)


def add_request_logging(app: FastAPI, tag: str) -> None:
    """Log one line per request: method, path, status, duration."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            f"[{tag}] {request.method} {request.url.path} {response.status_code} {duration_ms}ms"
        )
        return response


def register_exception_handlers(app: FastAPI) -> None:
    """Report database failures to the caller instead of masking them."""

    @app.exception_handler(OperationalError)
    async def database_unavailable(request: Request, exc: OperationalError) -> JSONResponse:
        logger.error(f"Database unavailable on {request.url.path}: {str(exc)}", exc_info=exc)
        return JSONResponse(status_code=503, content={"detail": "Database unavailable"})

    @app.exception_handler(DBAPIError)
    async def database_error(request: Request, exc: DBAPIError) -> JSONResponse:
        if exc.connection_invalidated:
            logger.error(f"Database connection lost on {request.url.path}", exc_info=exc)
            return JSONResponse(status_code=503, content={"detail": "Database unavailable"})
        logger.error(f"Database error on {request.url.path}: {str(exc)}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Database error"})

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(f"Query failed on {request.url.path}: {str(exc)}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Database error"})


def health_router(service: str) -> APIRouter:
    """`GET /health`: runs SELECT 1 against the shared database."""
    router = APIRouter()

    @router.get("/health")
    def health_check(request: Request):
        database: Database = request.app.state.database
        try:
            database.ping()
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: {str(e)}")
            return JSONResponse(
                status_code=503,
                content={"ok": False, "service": service, "error": "Database unavailable"},
            )
        return {"ok": True, "service": service, "db": "connected"}

    return router
