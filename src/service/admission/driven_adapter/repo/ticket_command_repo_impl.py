from datetime import datetime
from typing import AsyncContextManager, Callable

from sqlalchemy import func, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.admission.domain.entity.ticket_entity import Ticket
from src.service.admission.driven_adapter.model.ticket_model import TicketModel
from src.service.admission.driven_adapter.model.ticket_type_model import TicketTypeModel


class TicketCommandRepoImpl(ITicketCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, ticket: Ticket) -> Ticket:
        async with self.session_factory() as session:
            session.add(
                TicketModel(
                    id=ticket.id,
                    ticket_type_id=ticket.ticket_type_id,
                    email=ticket.email,
                    name=ticket.name,
                    used=False,
                    issued_at=ticket.issued_at,
                )
            )
            await session.commit()
        return ticket

    @Logger.io
    async def mark_used(
        self, *, ticket_id: str, event_id: str, scanner_key_id: str, used_at: datetime
    ) -> bool:
        event_ticket_types = select(TicketTypeModel.id).where(TicketTypeModel.event_id == event_id)
        stmt = (
            update(TicketModel)
            .where(
                TicketModel.id == ticket_id,
                TicketModel.used.is_(False),
                TicketModel.ticket_type_id.in_(event_ticket_types),
            )
            .values(used=True, used_at=used_at, used_by_scanner_key_id=scanner_key_id)
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def force_burn(self, *, ticket_ids: list[str], burned_at: datetime) -> int:
        # A ticket already redeemed keeps its scan stamp; an unused one gets
        # burned_at and no scanner key
        stmt = (
            update(TicketModel)
            .where(TicketModel.id.in_(ticket_ids))
            .values(
                used=True,
                used_at=func.coalesce(
                    TicketModel.used_at, literal(burned_at, type_=TicketModel.used_at.type)
                ),
            )
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount  # type: ignore[attr-defined]
