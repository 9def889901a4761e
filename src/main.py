"""
Production FastAPI Application

Serve with: granian --interface asgi src.main:app
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.di import cleanup, container, setup
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Admission Service] Starting up...')

    container.wire(modules=WIRE_MODULES)
    setup()
    Logger.base.info('🔌 [Admission Service] Dependency injection wired')

    config = container.config_service()
    if config.DB_CREATE_TABLES:
        await container.database().create_tables()

    if config.ISSUE_API_KEY is None:
        Logger.base.warning('⚠️  [Admission Service] ISSUE_API_KEY not set, /tickets/issue is open')
    if config.admin_api_key is None:
        Logger.base.warning('⚠️  [Admission Service] No admin key set, /admin/* will answer 500')

    Logger.base.info('✅ [Admission Service] Ready to serve requests')
    yield

    Logger.base.info('🛑 [Admission Service] Shutting down...')
    await cleanup()
    Logger.base.info('🗄️  [Admission Service] Database pool closed')

    container.unwire()
    Logger.base.info('👋 [Admission Service] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
