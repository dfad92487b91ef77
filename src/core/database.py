"""
Database engine and session management.

A single Database is built at startup and handed to whatever needs it
(the FastAPI apps keep it on app.state, the Celery worker builds its own).
"""

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings
from src.core.logging import get_logger

logger = get_logger(__name__)


class Database:
    """Connection pool plus session factory for the shared database."""

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 20,
        statement_timeout_ms: int = 30000,
        ssl: bool = True,
    ) -> None:
        connect_args: dict[str, str] = {
            "options": f"-c statement_timeout={statement_timeout_ms}",
        }
        if ssl:
            connect_args["sslmode"] = "require"

        self.engine: Engine = create_engine(
            url,
            pool_size=pool_size,
            pool_pre_ping=True,
            pool_recycle=1800,
            connect_args=connect_args,
        )
        self.session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.database_pool_max,
            statement_timeout_ms=settings.database_statement_timeout_ms,
            ssl=settings.database_ssl,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Open a session and always release its connection.

        Uncommitted work is rolled back when the block raises.
        """
        db = self.session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ping(self) -> None:
        """Run a trivial query; raises if the database is unreachable."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        logger.info("Disposing database connection pool")
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """Get a database session for the current request."""
    database: Database = request.app.state.database
    with database.session() as db:
        yield db
