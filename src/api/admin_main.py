"""
Admin panel service entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.common import add_request_logging, health_router, register_exception_handlers
from src.api.routers import admin
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
    if not settings.admin_password or not settings.admin_jwt_secret:
        logger.warning("ADMIN_PASSWORD / ADMIN_JWT_SECRET not set: admin login is disabled")
    logger.info(f"Starting admin service on port {settings.admin_port} ({settings.app_env})")

    yield

    # Shutdown
    app.state.database.dispose()
    logger.info("Admin service stopped")


app = FastAPI(
    title="RapidCall Admin",
    description="Read-only views over users, workspaces, agents, calls and billing",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
add_request_logging(app, "Admin")
register_exception_handlers(app)

app.include_router(health_router("admin"))
app.include_router(admin.login_router, prefix="/api/admin", tags=["admin-auth"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.admin_port)
