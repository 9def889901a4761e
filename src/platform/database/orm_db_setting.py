"""
SQLAlchemy async engine and session management

This module provides:
1. AsyncEngineManager: owns one engine per running event loop
2. Base: declarative base for every ORM model
3. Database: the pooled store client handed to repositories via DI

Every repository call opens `Database.session()` for exactly one logical
operation; the context manager returns the connection to the pool on every
exit path and rolls back anything left uncommitted.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import Settings
from src.platform.logging.loguru_io import Logger


class AsyncEngineManager:
    """
    Manages a SQLAlchemy async engine with event loop awareness.

    Ensures the engine is always bound to the current event loop to prevent
    "Task got Future attached to a different loop" errors (test clients run
    the app on their own loop).
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def url(self) -> str:
        return self._settings.DATABASE_URL_ASYNC

    def get_engine(self) -> AsyncEngine:
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            if self._engine is None:
                self._engine = self._create_engine()
            return self._engine

        if self._loop is not current_loop:
            if self._engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, replacing engine')
                self._session_maker = None
            self._engine = self._create_engine()
            self._loop = current_loop
            Logger.base.info(f'🔗 [DB] Engine created for event loop {id(current_loop)}')

        return self._engine

    def get_session_maker(self) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine()
        if self._session_maker is None:
            self._session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_maker

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._loop = None
        self._session_maker = None

    def _create_engine(self) -> AsyncEngine:
        options: dict[str, Any] = {'echo': False}
        if self.url.startswith('sqlite'):
            # Writers wait on the file lock instead of failing at once
            options['connect_args'] = {'timeout': 30}
        else:
            options |= {
                'pool_size': self._settings.DB_POOL_SIZE,
                'max_overflow': self._settings.DB_POOL_MAX_OVERFLOW,
                'pool_timeout': self._settings.DB_POOL_TIMEOUT,
                'pool_recycle': self._settings.DB_POOL_RECYCLE,
                'pool_pre_ping': self._settings.DB_POOL_PRE_PING,
            }
        return create_async_engine(self.url, **options)


class Base(DeclarativeBase):
    pass


class Database:
    """Pooled store client for dependency injection."""

    def __init__(self, settings: Settings) -> None:
        self._engine_manager = AsyncEngineManager(settings)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine_manager.get_engine()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session_maker = self._engine_manager.get_session_maker()
        async with session_maker() as session:
            yield session

    async def create_tables(self) -> None:
        """Create tables if they don't exist"""
        # Models register themselves on Base.metadata at import
        import src.service.admission.driven_adapter.model  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        Logger.base.info('🗄️  [DB] Tables ensured')

    async def dispose(self) -> None:
        await self._engine_manager.dispose()
