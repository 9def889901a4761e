from typing import Literal, Optional, Union

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from src.platform.logging.loguru_io import Logger
from src.service.admission.app.command.burn_tickets_use_case import BurnTicketsUseCase
from src.service.admission.app.command.resend_ticket_link_use_case import (
    ResendTicketLinkUseCase,
)
from src.service.admission.app.query.list_attendance_use_case import (
    ListAttendanceUseCase,
    render_attendance_csv,
)
from src.service.admission.app.query.list_tickets_by_email_use_case import (
    ListTicketsByEmailUseCase,
)
from src.service.admission.driving_adapter.http_controller.auth.api_key_auth import (
    require_admin_key,
)
from src.service.admission.driving_adapter.http_controller.schema.admin_schema import (
    AttendanceResponse,
    BurnTicketsRequest,
    BurnTicketsResponse,
    ResendTicketRequest,
    TicketsByEmailRequest,
    TicketsByEmailResponse,
)
from src.service.admission.driving_adapter.http_controller.schema.ticket_schema import (
    EmailResultResponse,
    IssueTicketResponse,
    TicketResponse,
)


router = APIRouter(dependencies=[Depends(require_admin_key)])


@router.post('/tickets/burn')
@Logger.io
async def burn_tickets(
    request: BurnTicketsRequest,
    use_case: BurnTicketsUseCase = Depends(BurnTicketsUseCase.depends),
) -> BurnTicketsResponse:
    """Force tickets into the redeemed state; already-used tickets keep their timestamp."""
    outcome = await use_case.burn(raw_ids=request.requested_ids())
    return BurnTicketsResponse(burned=outcome.burned, rows=outcome.ticket_ids)


@router.post('/tickets/resend', response_model_exclude_none=True)
@Logger.io
async def resend_ticket_link(
    request: ResendTicketRequest,
    http_request: Request,
    use_case: ResendTicketLinkUseCase = Depends(ResendTicketLinkUseCase.depends),
) -> IssueTicketResponse:
    """Mail an existing ticket's link again; no ticket is created."""
    resent = await use_case.resend(
        ticket_id=request.ticket_id,
        link_only=True if request.link_only is None else request.link_only,
        origin=str(http_request.base_url),
    )
    return IssueTicketResponse(
        ticket_id=resent.ticket.id,
        ticket_url=resent.ticket_url,
        issued_at=resent.ticket.issued_at,
        email=EmailResultResponse(**resent.email_result.to_dict()),
    )


@router.post('/tickets/by-email', response_model_exclude_none=True)
@Logger.io
async def list_tickets_by_email(
    request: TicketsByEmailRequest,
    use_case: ListTicketsByEmailUseCase = Depends(ListTicketsByEmailUseCase.depends),
) -> TicketsByEmailResponse:
    tickets = await use_case.list_by_email(email=request.email, limit=request.limit)
    return TicketsByEmailResponse(tickets=[TicketResponse.from_view(t) for t in tickets])


@router.get(
    '/attendance',
    response_model=None,
    responses={200: {'content': {'text/csv': {}}, 'model': AttendanceResponse}},
)
@Logger.io
async def list_attendance(
    event_id: Optional[str] = Query(default=None, alias='eventId'),
    limit: Optional[int] = Query(default=None),
    output_format: Literal['json', 'csv'] = Query(default='json', alias='format'),
    use_case: ListAttendanceUseCase = Depends(ListAttendanceUseCase.depends),
) -> Union[AttendanceResponse, PlainTextResponse]:
    rows = await use_case.list_attendance(event_id=event_id, limit=limit)
    if output_format == 'csv':
        return PlainTextResponse(
            content=render_attendance_csv(rows),
            media_type='text/csv',
            headers={'Content-Disposition': 'attachment; filename="attendance.csv"'},
        )
    return AttendanceResponse(rows=[TicketResponse.from_view(r) for r in rows])
