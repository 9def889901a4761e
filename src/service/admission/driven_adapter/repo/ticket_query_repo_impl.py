from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.admission.domain.entity.ticket_entity import TicketView
from src.service.admission.driven_adapter.model.event_model import EventModel
from src.service.admission.driven_adapter.model.scanner_key_model import ScannerKeyModel
from src.service.admission.driven_adapter.model.ticket_model import TicketModel
from src.service.admission.driven_adapter.model.ticket_type_model import TicketTypeModel


class TicketQueryRepoImpl(ITicketQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @staticmethod
    def _view_query() -> Select:
        return (
            select(
                TicketModel.id,
                TicketModel.email,
                TicketModel.name,
                TicketModel.used,
                TicketModel.used_at,
                TicketModel.issued_at,
                TicketModel.ticket_type_id,
                TicketTypeModel.name.label('ticket_type'),
                TicketTypeModel.price,
                TicketTypeModel.event_id,
                EventModel.name.label('event_name'),
                EventModel.starts_at,
                EventModel.venue,
                ScannerKeyModel.label.label('scanned_by'),
            )
            .join(TicketTypeModel, TicketTypeModel.id == TicketModel.ticket_type_id)
            .join(EventModel, EventModel.id == TicketTypeModel.event_id)
            .outerjoin(ScannerKeyModel, ScannerKeyModel.id == TicketModel.used_by_scanner_key_id)
        )

    @Logger.io
    async def get_view(
        self, *, ticket_id: str, event_id: Optional[str] = None
    ) -> Optional[TicketView]:
        stmt = self._view_query().where(TicketModel.id == ticket_id)
        if event_id is not None:
            stmt = stmt.where(TicketTypeModel.event_id == event_id)

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            row = result.mappings().one_or_none()
            return TicketView(**row) if row else None

    @Logger.io
    async def list_by_email(self, *, email: str, limit: int) -> List[TicketView]:
        stmt = (
            self._view_query()
            .where(func.lower(TicketModel.email) == email.strip().lower())
            .order_by(TicketModel.issued_at.desc())
            .limit(limit)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [TicketView(**row) for row in result.mappings().all()]

    @Logger.io
    async def list_used(self, *, event_id: Optional[str], limit: int) -> List[TicketView]:
        stmt = self._view_query().where(TicketModel.used.is_(True))
        if event_id is not None:
            stmt = stmt.where(TicketTypeModel.event_id == event_id)
        stmt = stmt.order_by(TicketModel.used_at.desc()).limit(limit)

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [TicketView(**row) for row in result.mappings().all()]
