from datetime import datetime
from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_scanner_key_query_repo import IScannerKeyQueryRepo
from src.service.admission.domain.entity.scanner_key_entity import ScannerKey
from src.service.admission.driven_adapter.model.scanner_key_model import ScannerKeyModel


class ScannerKeyQueryRepoImpl(IScannerKeyQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_usable_by_hash(self, *, key_hash: str, now: datetime) -> Optional[ScannerKey]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ScannerKeyModel).where(
                    ScannerKeyModel.key_hash == key_hash,
                    ScannerKeyModel.active.is_(True),
                    or_(ScannerKeyModel.expires_at.is_(None), ScannerKeyModel.expires_at > now),
                )
            )
            model = result.scalar_one_or_none()

            if not model:
                return None

            return ScannerKey(
                id=model.id,
                event_id=model.event_id,
                label=model.label,
                active=model.active,
                expires_at=model.expires_at,
            )
