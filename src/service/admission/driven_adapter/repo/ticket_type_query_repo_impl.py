from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_ticket_type_query_repo import ITicketTypeQueryRepo
from src.service.admission.domain.entity.ticket_type_entity import TicketType
from src.service.admission.driven_adapter.model.event_model import EventModel
from src.service.admission.driven_adapter.model.ticket_type_model import TicketTypeModel


class TicketTypeQueryRepoImpl(ITicketTypeQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @staticmethod
    def _base_query() -> Select:
        return select(
            TicketTypeModel.id,
            TicketTypeModel.event_id,
            TicketTypeModel.name,
            TicketTypeModel.price,
            EventModel.name.label('event_name'),
            EventModel.starts_at,
            EventModel.venue,
        ).join(EventModel, EventModel.id == TicketTypeModel.event_id)

    @Logger.io
    async def get_by_id(self, *, ticket_type_id: str) -> Optional[TicketType]:
        async with self.session_factory() as session:
            result = await session.execute(
                self._base_query().where(TicketTypeModel.id == ticket_type_id)
            )
            row = result.mappings().one_or_none()
            return TicketType(**row) if row else None

    @Logger.io
    async def list_all(self) -> List[TicketType]:
        async with self.session_factory() as session:
            result = await session.execute(
                self._base_query().order_by(EventModel.starts_at, TicketTypeModel.name)
            )
            return [TicketType(**row) for row in result.mappings().all()]
