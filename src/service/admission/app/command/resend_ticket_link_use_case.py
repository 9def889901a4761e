from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.admission.app.command.issue_ticket_use_case import (
    build_ticket_url,
    notify_holder,
)
from src.service.admission.app.interface.i_qr_code_generator import IQrCodeGenerator
from src.service.admission.app.interface.i_ticket_mailer import ITicketMailer
from src.service.admission.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.admission.app.interface.i_ticket_type_query_repo import ITicketTypeQueryRepo
from src.service.admission.domain.entity.ticket_entity import Ticket
from src.service.admission.domain.value_object.issued_ticket import IssuedTicket
from src.service.shared_kernel.domain.value_object.ticket_token import is_valid_token


class ResendTicketLinkUseCase:
    """
    Mail the link of an existing ticket again.

    Nothing is created or changed; the ticket may already be used. The
    delivery outcome comes back exactly like a fresh issue's email result.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        ticket_query_repo: ITicketQueryRepo,
        ticket_type_query_repo: ITicketTypeQueryRepo,
        ticket_mailer: ITicketMailer,
        qr_code_generator: IQrCodeGenerator,
    ) -> None:
        self.settings = settings
        self.ticket_query_repo = ticket_query_repo
        self.ticket_type_query_repo = ticket_type_query_repo
        self.ticket_mailer = ticket_mailer
        self.qr_code_generator = qr_code_generator

    @classmethod
    @inject
    def depends(
        cls,
        settings: Settings = Depends(Provide[Container.config_service]),
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
        ticket_type_query_repo: ITicketTypeQueryRepo = Depends(
            Provide[Container.ticket_type_query_repo]
        ),
        ticket_mailer: ITicketMailer = Depends(Provide[Container.ticket_mailer]),
        qr_code_generator: IQrCodeGenerator = Depends(Provide[Container.qr_code_generator]),
    ) -> Self:
        return cls(
            settings=settings,
            ticket_query_repo=ticket_query_repo,
            ticket_type_query_repo=ticket_type_query_repo,
            ticket_mailer=ticket_mailer,
            qr_code_generator=qr_code_generator,
        )

    @Logger.io
    async def resend(
        self, *, ticket_id: Optional[str], link_only: bool = True, origin: str = ''
    ) -> IssuedTicket:
        ticket_id = (ticket_id or '').strip()
        if not ticket_id:
            raise DomainError('Missing ticketId')
        if not is_valid_token(ticket_id):
            raise DomainError('Invalid ticketId')

        view = await self.ticket_query_repo.get_view(ticket_id=ticket_id.lower())
        if view is None:
            raise NotFoundError('NOT_FOUND')
        ticket_type = await self.ticket_type_query_repo.get_by_id(
            ticket_type_id=view.ticket_type_id
        )
        if ticket_type is None:
            raise NotFoundError('NOT_FOUND')

        ticket = Ticket(
            id=view.id,
            ticket_type_id=view.ticket_type_id,
            email=view.email,
            name=view.name,
            used=view.used,
            used_at=view.used_at,
            issued_at=view.issued_at,
        )
        ticket_url = build_ticket_url(settings=self.settings, ticket_id=ticket.id, origin=origin)
        Logger.base.info(f'🔁 [Resend] {ticket.id} to {ticket.email}')

        email_result = await notify_holder(
            ticket_mailer=self.ticket_mailer,
            qr_code_generator=self.qr_code_generator,
            ticket=ticket,
            ticket_type=ticket_type,
            ticket_url=ticket_url,
            link_only=link_only,
        )
        return IssuedTicket(ticket=ticket, ticket_url=ticket_url, email_result=email_result)
