from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from src.platform.config.core_setting import Settings
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.service.admission.app.command.resend_ticket_link_use_case import ResendTicketLinkUseCase
from src.service.admission.app.interface.i_qr_code_generator import IQrCodeGenerator
from src.service.admission.app.interface.i_ticket_mailer import ITicketMailer
from src.service.admission.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.admission.app.interface.i_ticket_type_query_repo import ITicketTypeQueryRepo
from src.service.admission.domain.entity.ticket_entity import TicketView
from src.service.admission.domain.entity.ticket_type_entity import TicketType
from src.service.admission.domain.value_object.email_delivery import EmailDeliveryResult


TICKET_ID = '9a3c5b1e-0d2f-4e6a-8b7c-1d2e3f4a5b6c'
TYPE_ID = '0b6f7c3e-6a59-4a8e-9d3b-5a2f1f0c9e11'
EVENT_ID = '3f2a1b0c-9d8e-4f7a-8b6c-5d4e3f2a1b0c'


@pytest.fixture
def view() -> TicketView:
    return TicketView(
        id=TICKET_ID,
        email='jon@hi.is',
        name='Jón',
        used=True,
        used_at=datetime(2025, 3, 1, 20, 15, tzinfo=timezone.utc),
        issued_at=datetime(2025, 2, 1, 12, 0, tzinfo=timezone.utc),
        ticket_type_id=TYPE_ID,
        ticket_type='Matur + ball',
        price=9900,
        event_id=EVENT_ID,
        event_name='Árshátíð FV',
    )


@pytest.fixture
def query_repo(view: TicketView) -> AsyncMock:
    repo = AsyncMock(spec=ITicketQueryRepo)
    repo.get_view.return_value = view
    return repo


@pytest.fixture
def type_repo() -> AsyncMock:
    repo = AsyncMock(spec=ITicketTypeQueryRepo)
    repo.get_by_id.return_value = TicketType(
        id=TYPE_ID, event_id=EVENT_ID, name='Matur + ball', event_name='Árshátíð FV'
    )
    return repo


@pytest.fixture
def mailer() -> AsyncMock:
    mailer = AsyncMock(spec=ITicketMailer)
    mailer.send_ticket.return_value = EmailDeliveryResult.sent('<2@mail>')
    return mailer


@pytest.fixture
def qr() -> Mock:
    qr = Mock(spec=IQrCodeGenerator)
    qr.png.return_value = b'\x89PNG fake'
    return qr


@pytest.fixture
def use_case(
    query_repo: AsyncMock, type_repo: AsyncMock, mailer: AsyncMock, qr: Mock
) -> ResendTicketLinkUseCase:
    return ResendTicketLinkUseCase(
        settings=Settings(TICKETS_PUBLIC_BASE_URL='https://tickets.example.is'),
        ticket_query_repo=query_repo,
        ticket_type_query_repo=type_repo,
        ticket_mailer=mailer,
        qr_code_generator=qr,
    )


@pytest.mark.unit
class TestResendTicketLink:
    async def test_mails_existing_ticket_link(
        self,
        use_case: ResendTicketLinkUseCase,
        query_repo: AsyncMock,
        mailer: AsyncMock,
        qr: Mock,
    ) -> None:
        resent = await use_case.resend(ticket_id=f' {TICKET_ID.upper()} ')

        query_repo.get_view.assert_awaited_once_with(ticket_id=TICKET_ID)
        assert resent.ticket_url == f'https://tickets.example.is/t/{TICKET_ID}'
        assert resent.email_result.ok is True
        sent = mailer.send_ticket.await_args.kwargs
        assert sent['ticket'].id == TICKET_ID
        assert sent['ticket'].email == 'jon@hi.is'
        assert sent['ticket'].used is True
        assert sent['qr_png'] is None
        qr.png.assert_not_called()

    async def test_with_qr(
        self, use_case: ResendTicketLinkUseCase, mailer: AsyncMock, qr: Mock
    ) -> None:
        await use_case.resend(ticket_id=TICKET_ID, link_only=False)

        qr.png.assert_called_once_with(TICKET_ID)
        assert mailer.send_ticket.await_args.kwargs['qr_png'] == b'\x89PNG fake'

    @pytest.mark.parametrize(
        'ticket_id,error',
        [(None, 'Missing ticketId'), ('  ', 'Missing ticketId'), ('abc', 'Invalid ticketId')],
    )
    async def test_rejects_bad_ids(
        self,
        use_case: ResendTicketLinkUseCase,
        query_repo: AsyncMock,
        ticket_id: str,
        error: str,
    ) -> None:
        with pytest.raises(DomainError, match=error):
            await use_case.resend(ticket_id=ticket_id)

        query_repo.get_view.assert_not_awaited()

    async def test_unknown_ticket(
        self, use_case: ResendTicketLinkUseCase, query_repo: AsyncMock, mailer: AsyncMock
    ) -> None:
        query_repo.get_view.return_value = None

        with pytest.raises(NotFoundError):
            await use_case.resend(ticket_id=TICKET_ID)

        mailer.send_ticket.assert_not_awaited()

    async def test_mail_failure_is_reported_not_raised(
        self, use_case: ResendTicketLinkUseCase, mailer: AsyncMock
    ) -> None:
        mailer.send_ticket.return_value = EmailDeliveryResult.failed('550 mailbox unavailable')

        resent = await use_case.resend(ticket_id=TICKET_ID)

        assert resent.email_result.to_dict() == {'ok': False, 'error': '550 mailbox unavailable'}
