from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_ticket_type_query_repo import ITicketTypeQueryRepo
from src.service.admission.domain.entity.ticket_type_entity import TicketType


class ListTicketTypesUseCase:
    def __init__(self, ticket_type_query_repo: ITicketTypeQueryRepo) -> None:
        self.ticket_type_query_repo = ticket_type_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_type_query_repo: ITicketTypeQueryRepo = Depends(
            Provide[Container.ticket_type_query_repo]
        ),
    ) -> Self:
        return cls(ticket_type_query_repo=ticket_type_query_repo)

    @Logger.io
    async def list_types(self) -> List[TicketType]:
        return await self.ticket_type_query_repo.list_all()
