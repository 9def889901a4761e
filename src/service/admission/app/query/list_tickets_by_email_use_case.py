from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.admission.domain.entity.ticket_entity import TicketView


DEFAULT_LIMIT = 50
MAX_LIMIT = 500


def clamp_limit(limit: Optional[int], *, default: int, maximum: int) -> int:
    if limit is None:
        return default
    return max(1, min(maximum, limit))


class ListTicketsByEmailUseCase:
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
    async def list_by_email(
        self, *, email: Optional[str], limit: Optional[int] = None
    ) -> List[TicketView]:
        """Newest first, case-insensitive on the address."""
        email = (email or '').strip()
        if not email:
            raise DomainError('Missing email')

        return await self.ticket_query_repo.list_by_email(
            email=email, limit=clamp_limit(limit, default=DEFAULT_LIMIT, maximum=MAX_LIMIT)
        )
