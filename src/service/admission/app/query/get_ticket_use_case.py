from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.admission.domain.entity.ticket_entity import TicketView
from src.service.shared_kernel.domain.value_object.ticket_token import is_valid_token


class GetTicketUseCase:
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
    async def get_ticket(self, *, ticket_id: Optional[str]) -> TicketView:
        ticket_id = (ticket_id or '').strip()
        if not ticket_id:
            raise DomainError('Missing query param: id')
        if not is_valid_token(ticket_id):
            raise DomainError('Invalid id (expected UUID)')

        ticket = await self.ticket_query_repo.get_view(ticket_id=ticket_id.lower())
        if not ticket:
            raise NotFoundError('NOT_FOUND')

        return ticket
