#!/usr/bin/env python3
"""
Database Reset Script
Drop and recreate every table of the admission schema

Notes:
- Works against any DATABASE_URL_ASYNC (PostgreSQL or SQLite)
- To seed data afterwards, run `python script/seed_data.py`
"""

import asyncio

from src.platform.config.di import cleanup, container
from src.platform.database.orm_db_setting import Base


async def main() -> None:
    print('🗑️  Resetting database...')
    database = container.database()
    # Registers every model on Base.metadata
    await database.create_tables()

    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        print(f'   ✅ Dropped {len(Base.metadata.tables)} tables')
        await conn.run_sync(Base.metadata.create_all)
        print('   ✅ Schema recreated')

    await cleanup()
    print('✅ Database reset complete')


if __name__ == '__main__':
    asyncio.run(main())
