"""
Test Configuration and Fixtures

This module provides:
- Environment setup before application modules read it at import time
- A fresh SQLite database file per test, wired into the DI container
- Seeded events, ticket types and scanner keys
- An httpx AsyncClient bound to the ASGI app (no network, no lifespan)

Architecture:
- Unit tests (@pytest.mark.unit): stub repositories / AsyncMock, no database
- Integration tests: real schema on sqlite+aiosqlite, real FastAPI app
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the loguru sinks are built when their modules are imported
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    # Never let a developer .env point tests at a real database or mail server
    os.environ['DATABASE_URL_ASYNC'] = 'sqlite+aiosqlite:///:memory:'
    os.environ['DEBUG'] = 'false'
    for key in ('ISSUE_API_KEY', 'ADMIN_API_KEY', 'EMAIL_SERVER', 'TICKETS_PUBLIC_BASE_URL'):
        os.environ.pop(key, None)


_early_setup_test_environment()

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Optional  # noqa: E402

import attrs  # noqa: E402
from dependency_injector import providers  # noqa: E402
from fastapi import FastAPI  # noqa: E402
import httpx  # noqa: E402
import pytest  # noqa: E402

from src.platform.config.core_setting import Settings  # noqa: E402
from src.platform.config.di import container  # noqa: E402
from src.platform.config.wire_modules import WIRE_MODULES  # noqa: E402
from src.platform.database.orm_db_setting import Database  # noqa: E402
from src.service.admission.app.query.authorize_scanner_use_case import (  # noqa: E402
    hash_scanner_secret,
)
from src.service.admission.driven_adapter.model import (  # noqa: E402
    EventModel,
    ScannerKeyModel,
    TicketModel,
    TicketTypeModel,
)
from src.service.shared_kernel.domain.value_object.ticket_token import new_token  # noqa: E402


ADMIN_KEY = 'admin-test-key'
PUBLIC_BASE_URL = 'https://tickets.test'

DOOR_SECRET = 'door-a-secret'
OTHER_DOOR_SECRET = 'door-b-secret'
INACTIVE_SECRET = 'retired-secret'
EXPIRED_SECRET = 'expired-secret'


@attrs.frozen
class SeededEvents:
    event_id: str
    food_and_ball_type_id: str
    ball_only_type_id: str
    scanner_key_id: str
    other_event_id: str
    other_type_id: str
    door_secret: str = DOOR_SECRET
    other_door_secret: str = OTHER_DOOR_SECRET
    inactive_secret: str = INACTIVE_SECRET
    expired_secret: str = EXPIRED_SECRET


# =============================================================================
# Settings and Database
# =============================================================================
@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        DATABASE_URL_ASYNC=f'sqlite+aiosqlite:///{tmp_path / "tickets.db"}',
        DB_CREATE_TABLES=True,
        ISSUE_API_KEY=None,
        ADMIN_API_KEY=ADMIN_KEY,  # type: ignore[arg-type]
        TICKETS_PUBLIC_BASE_URL=PUBLIC_BASE_URL,
        EMAIL_SERVER=None,
        EMAIL_SENDER=None,
    )


@pytest.fixture
async def database(test_settings: Settings) -> AsyncIterator[Database]:
    container.config_service.override(providers.Object(test_settings))
    container.reset_singletons()

    db = container.database()
    await db.create_tables()
    yield db

    await db.dispose()
    container.reset_singletons()
    container.config_service.reset_override()


@pytest.fixture
async def seeded(database: Database) -> SeededEvents:
    """Two events; keys for the first one in every state a key can be in."""
    now = datetime.now(timezone.utc)
    seeded = SeededEvents(
        event_id=new_token(),
        food_and_ball_type_id=new_token(),
        ball_only_type_id=new_token(),
        scanner_key_id=new_token(),
        other_event_id=new_token(),
        other_type_id=new_token(),
    )

    async with database.session() as session:
        session.add_all(
            [
                EventModel(id=seeded.event_id, name='Árshátíð FV', venue='Gamla bíó'),
                EventModel(id=seeded.other_event_id, name='Vorball'),
            ]
        )
        await session.flush()
        session.add_all(
            [
                TicketTypeModel(
                    id=seeded.food_and_ball_type_id,
                    event_id=seeded.event_id,
                    name='Matur + ball',
                    price=9900,
                ),
                TicketTypeModel(
                    id=seeded.ball_only_type_id,
                    event_id=seeded.event_id,
                    name='Bara ball',
                    price=4900,
                ),
                TicketTypeModel(
                    id=seeded.other_type_id,
                    event_id=seeded.other_event_id,
                    name='Vorball',
                    price=3000,
                ),
            ]
        )
        session.add_all(
            [
                ScannerKeyModel(
                    id=seeded.scanner_key_id,
                    key_hash=hash_scanner_secret(DOOR_SECRET),
                    label='Door A',
                    event_id=seeded.event_id,
                    active=True,
                ),
                ScannerKeyModel(
                    id=new_token(),
                    key_hash=hash_scanner_secret(OTHER_DOOR_SECRET),
                    label='Door B',
                    event_id=seeded.other_event_id,
                    active=True,
                ),
                ScannerKeyModel(
                    id=new_token(),
                    key_hash=hash_scanner_secret(INACTIVE_SECRET),
                    label='Retired',
                    event_id=seeded.event_id,
                    active=False,
                ),
                ScannerKeyModel(
                    id=new_token(),
                    key_hash=hash_scanner_secret(EXPIRED_SECRET),
                    label='Yesterday',
                    event_id=seeded.event_id,
                    active=True,
                    expires_at=now - timedelta(days=1),
                ),
            ]
        )
        await session.commit()

    return seeded


InsertTicket = Callable[..., Awaitable[str]]


@pytest.fixture
def insert_ticket(database: Database) -> InsertTicket:
    """Insert a ticket row directly, bypassing issuance side effects."""

    async def _insert(
        *,
        ticket_type_id: str,
        email: str = 'gestur@example.is',
        name: Optional[str] = 'Gestur',
        issued_at: Optional[datetime] = None,
    ) -> str:
        ticket_id = new_token()
        async with database.session() as session:
            session.add(
                TicketModel(
                    id=ticket_id,
                    ticket_type_id=ticket_type_id,
                    email=email,
                    name=name,
                    used=False,
                    issued_at=issued_at or datetime.now(timezone.utc),
                )
            )
            await session.commit()
        return ticket_id

    return _insert


# =============================================================================
# ASGI App and HTTP Client
# =============================================================================
@pytest.fixture
def app(database: Database) -> Iterator[FastAPI]:
    from src.main import app as fastapi_app

    container.wire(modules=WIRE_MODULES)
    yield fastapi_app
    container.unwire()


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url='http://testserver') as c:
        yield c


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {'Authorization': f'Bearer {ADMIN_KEY}'}
