"""
PostgreSQL engine and session management for uploaded file storage.

The engine is created lazily from Settings; the schema is applied from the
SQL files in migrations/ at application startup.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine
)

from tabular_insights.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


class DatabaseManager:
    """Owns the async engine and hands out transactional sessions."""

    def __init__(self):
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    def init(self, settings: Optional[Settings] = None, database_url: Optional[str] = None):
        """
        Create the engine and session factory.

        Args:
            settings: Pool sizing and default URL. Uses get_settings() if not provided.
            database_url: Overrides settings.postgres_async_url.
        """
        settings = settings or get_settings()
        url = database_url or settings.postgres_async_url

        self._engine = create_async_engine(
            url,
            echo=False,
            pool_size=settings.postgres_pool_size,
            max_overflow=settings.postgres_max_overflow,
            pool_pre_ping=True
        )
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
        logger.info(
            f"Database engine ready: {settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}"
        )

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self.init()
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            self.init()
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Session that commits on success and rolls back on error.

        Usage:
            async with db.session() as session:
                repo = FileDataRepository(session)
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        """Round-trip a trivial query; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self):
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")


db = DatabaseManager()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    Usage in FastAPI:
        @router.get("/files")
        async def handler(session: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with db.session() as session:
        yield session


def split_statements(sql: str) -> List[str]:
    """Split a migration file into statements, dropping comment-only chunks."""
    statements = []
    for chunk in sql.split(";"):
        lines = [line for line in chunk.splitlines() if not line.strip().startswith("--")]
        statement = "\n".join(lines).strip()
        if statement:
            statements.append(statement)
    return statements


async def init_database():
    """Apply every migrations/*.sql file in name order."""
    migration_files = sorted(MIGRATIONS_DIR.glob("*.sql"))
    if not migration_files:
        logger.warning(f"No migration files found in {MIGRATIONS_DIR}")
        return

    async with db.engine.begin() as conn:
        for path in migration_files:
            for statement in split_statements(path.read_text(encoding="utf-8")):
                await conn.execute(text(statement))
            logger.info(f"Applied migration {path.name}")
