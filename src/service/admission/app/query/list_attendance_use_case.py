import csv
import io
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.admission.app.query.list_tickets_by_email_use_case import clamp_limit
from src.service.admission.domain.entity.ticket_entity import TicketView
from src.service.shared_kernel.domain.value_object.ticket_token import is_valid_token


DEFAULT_LIMIT = 200
MAX_LIMIT = 2000

CSV_COLUMNS = (
    'used_at',
    'ticket_id',
    'name',
    'email',
    'ticket_type',
    'event_name',
    'scanned_by',
)


def render_attendance_csv(rows: List[TicketView]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(CSV_COLUMNS)
    for row in rows:
        writer.writerow(
            (
                row.used_at.isoformat() if row.used_at else '',
                row.id,
                row.name or '',
                row.email,
                row.ticket_type,
                row.event_name,
                row.scanned_by or '',
            )
        )
    return buffer.getvalue()


class ListAttendanceUseCase:
    """Scanned-in tickets, most recent entry first."""

    def __init__(self, ticket_query_repo: ITicketQueryRepo) -> None:
        self.ticket_query_repo = ticket_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
    ) -> Self:
        return cls(ticket_query_repo=ticket_query_repo)

    @Logger.io
    async def list_attendance(
        self, *, event_id: Optional[str] = None, limit: Optional[int] = None
    ) -> List[TicketView]:
        event_id = (event_id or '').strip().lower() or None
        if event_id is not None and not is_valid_token(event_id):
            raise DomainError('Invalid eventId')

        return await self.ticket_query_repo.list_used(
            event_id=event_id, limit=clamp_limit(limit, default=DEFAULT_LIMIT, maximum=MAX_LIMIT)
        )
