#!/usr/bin/env python3
"""
Database Seed Script
Populate one event, its ticket types and a scanner key

Features:
1. Create Event - the event every seeded type and key belongs to
2. Create Ticket Types - "Matur + ball" and "Bara ball"
3. Create Scanner Key - prints the bearer secret once; only its hash is stored

Notes:
- Run `python script/reset_database.py` first for a clean schema
- Ticket type ids are printed for CSV exports that carry a ticketTypeId column
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import secrets

from sqlalchemy import func, select

from src.platform.config.di import cleanup, container
from src.service.admission.app.query.authorize_scanner_use_case import hash_scanner_secret
from src.service.admission.driven_adapter.model import (
    EventModel,
    ScannerKeyModel,
    TicketModel,
    TicketTypeModel,
)
from src.service.shared_kernel.domain.value_object.ticket_token import new_token


@dataclass
class TicketTypeConfig:
    """Ticket type seed configuration"""
    name: str
    price: int


EVENT_NAME = 'Árshátíð FV'
EVENT_VENUE = 'Gamla bíó'

TICKET_TYPES = [
    TicketTypeConfig(name='Matur + ball', price=9900),
    TicketTypeConfig(name='Bara ball', price=4900),
]

SCANNER_KEY_LABEL = 'Door 1'


async def _seed_data() -> None:
    database = container.database()
    await database.create_tables()

    async with database.session() as session:
        try:
            starts_at = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=14)
            event = EventModel(
                id=new_token(), name=EVENT_NAME, starts_at=starts_at, venue=EVENT_VENUE
            )
            session.add(event)
            print(f'🎉 Created event: ID={event.id}, Name={event.name}')

            for config in TICKET_TYPES:
                ticket_type = TicketTypeModel(
                    id=new_token(), event_id=event.id, name=config.name, price=config.price
                )
                session.add(ticket_type)
                print(f'   🎟️  Ticket type: ID={ticket_type.id}, Name={ticket_type.name}')

            secret = secrets.token_urlsafe(32)
            session.add(
                ScannerKeyModel(
                    id=new_token(),
                    key_hash=hash_scanner_secret(secret),
                    label=SCANNER_KEY_LABEL,
                    event_id=event.id,
                    active=True,
                )
            )
            print(f'   🔑 Scanner key "{SCANNER_KEY_LABEL}": {secret}')
            print('      (shown once; scanners send it as "Authorization: Bearer <key>")')

            await session.commit()
            print('✅ All data committed successfully!')
        except Exception as e:
            await session.rollback()
            print(f'❌ Rolling back: {e}')
            raise


async def verify_data() -> None:
    print('🔍 Verifying seeded data...')
    async with container.database().session() as session:
        for model in (EventModel, TicketTypeModel, ScannerKeyModel, TicketModel):
            count = await session.scalar(select(func.count()).select_from(model))
            print(f'   {model.__tablename__} count: {count}')


async def main() -> None:
    print('🌱 Starting data seeding...')
    try:
        await _seed_data()
        await verify_data()
    finally:
        await cleanup()


if __name__ == '__main__':
    asyncio.run(main())
