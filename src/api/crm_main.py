"""
CRM service entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.common import add_request_logging, health_router, register_exception_handlers
from src.api.routers import contacts
from src.core.config import get_settings
from src.core.database import Database
from src.core.logging import get_logger

logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    app.state.database = Database.from_settings(settings)
    logger.info(f"Starting CRM service on port {settings.crm_port} ({settings.app_env})")

    yield

    # Shutdown
    app.state.database.dispose()
    logger.info("CRM service stopped")


app = FastAPI(
    title="RapidCall CRM",
    description="Contacts for a workspace: CRUD, CSV import and call-derived upserts",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "x-csrf-token"],
)
add_request_logging(app, "CRM")
register_exception_handlers(app)

app.include_router(health_router("crm"))
app.include_router(contacts.router, prefix="/api/crm", tags=["contacts"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.crm_port)
