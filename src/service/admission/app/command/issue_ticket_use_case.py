from datetime import datetime, timezone
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from qrcode.exceptions import DataOverflowError

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_qr_code_generator import IQrCodeGenerator
from src.service.admission.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.admission.app.interface.i_ticket_mailer import ITicketMailer
from src.service.admission.app.interface.i_ticket_type_query_repo import ITicketTypeQueryRepo
from src.service.admission.domain.entity.ticket_entity import Ticket
from src.service.admission.domain.entity.ticket_type_entity import TicketType
from src.service.admission.domain.value_object.email_delivery import EmailDeliveryResult
from src.service.admission.domain.value_object.issued_ticket import IssuedTicket
from src.service.shared_kernel.domain.value_object.ticket_token import is_valid_token


def build_ticket_url(*, settings: Settings, ticket_id: str, origin: str) -> str:
    base = settings.TICKETS_PUBLIC_BASE_URL or origin.rstrip('/')
    return f'{base}/t/{ticket_id}'


async def notify_holder(
    *,
    ticket_mailer: ITicketMailer,
    qr_code_generator: IQrCodeGenerator,
    ticket: Ticket,
    ticket_type: TicketType,
    ticket_url: str,
    link_only: bool,
) -> EmailDeliveryResult:
    qr_png = None
    if not link_only:
        try:
            qr_png = qr_code_generator.png(ticket.id)
        except (DataOverflowError, OSError, ValueError) as e:
            return EmailDeliveryResult.failed(f'QR generation failed: {e}')

    return await ticket_mailer.send_ticket(
        ticket=ticket, ticket_type=ticket_type, ticket_url=ticket_url, qr_png=qr_png
    )


class IssueTicketUseCase:
    """
    Issue one ticket and notify its holder.

    Flow:
    1. Validate input and resolve the ticket type
    2. Insert the ticket and commit
    3. Best effort: render a QR (unless link-only) and email the link

    Step 3 never undoes step 2; its outcome is returned as
    `IssuedTicket.email_result`. Duplicate emails are allowed here; campaign
    tooling dedupes upstream and admins burn leftovers.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        ticket_command_repo: ITicketCommandRepo,
        ticket_type_query_repo: ITicketTypeQueryRepo,
        ticket_mailer: ITicketMailer,
        qr_code_generator: IQrCodeGenerator,
    ) -> None:
        self.settings = settings
        self.ticket_command_repo = ticket_command_repo
        self.ticket_type_query_repo = ticket_type_query_repo
        self.ticket_mailer = ticket_mailer
        self.qr_code_generator = qr_code_generator

    @classmethod
    @inject
    def depends(
        cls,
        settings: Settings = Depends(Provide[Container.config_service]),
        ticket_command_repo: ITicketCommandRepo = Depends(Provide[Container.ticket_command_repo]),
        ticket_type_query_repo: ITicketTypeQueryRepo = Depends(
            Provide[Container.ticket_type_query_repo]
        ),
        ticket_mailer: ITicketMailer = Depends(Provide[Container.ticket_mailer]),
        qr_code_generator: IQrCodeGenerator = Depends(Provide[Container.qr_code_generator]),
    ) -> Self:
        return cls(
            settings=settings,
            ticket_command_repo=ticket_command_repo,
            ticket_type_query_repo=ticket_type_query_repo,
            ticket_mailer=ticket_mailer,
            qr_code_generator=qr_code_generator,
        )

    def build_ticket_url(self, *, ticket_id: str, origin: str) -> str:
        return build_ticket_url(settings=self.settings, ticket_id=ticket_id, origin=origin)

    @Logger.io
    async def issue(
        self,
        *,
        ticket_type_id: Optional[str],
        email: Optional[str],
        name: Optional[str] = None,
        link_only: bool = True,
        skip_email: bool = False,
        origin: str = '',
    ) -> IssuedTicket:
        ticket_type_id = (ticket_type_id or '').strip()
        email = (email or '').strip()
        if not ticket_type_id or not email:
            raise DomainError('Missing ticketTypeId or email')

        ticket_type = None
        if is_valid_token(ticket_type_id):
            ticket_type = await self.ticket_type_query_repo.get_by_id(
                ticket_type_id=ticket_type_id.lower()
            )
        if ticket_type is None:
            raise DomainError('Invalid ticketTypeId')

        ticket = await self.ticket_command_repo.create(
            ticket=Ticket.issue(
                ticket_type_id=ticket_type.id,
                email=email,
                name=name,
                issued_at=datetime.now(timezone.utc),
            )
        )
        ticket_url = self.build_ticket_url(ticket_id=ticket.id, origin=origin)
        Logger.base.info(f'🎫 [Issue] {ticket.id} ({ticket_type.name}) for {ticket.email}')

        if skip_email:
            email_result = EmailDeliveryResult.skipped_by_request()
        else:
            email_result = await notify_holder(
                ticket_mailer=self.ticket_mailer,
                qr_code_generator=self.qr_code_generator,
                ticket=ticket,
                ticket_type=ticket_type,
                ticket_url=ticket_url,
                link_only=link_only,
            )

        return IssuedTicket(ticket=ticket, ticket_url=ticket_url, email_result=email_result)
