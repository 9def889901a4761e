from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query, Request, Response

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.types.result import Err, raise_for_err
from src.service.admission.app.command.issue_ticket_use_case import IssueTicketUseCase
from src.service.admission.app.command.redeem_ticket_use_case import RedeemTicketUseCase
from src.service.admission.app.interface.i_qr_code_generator import IQrCodeGenerator
from src.service.admission.app.query.authorize_scanner_use_case import AuthorizeScannerUseCase
from src.service.admission.app.query.get_ticket_use_case import GetTicketUseCase
from src.service.admission.app.query.list_ticket_types_use_case import ListTicketTypesUseCase
from src.service.admission.driving_adapter.http_controller.auth.api_key_auth import (
    require_issue_key,
    require_scanner_bearer,
)
from src.service.admission.driving_adapter.http_controller.schema.ticket_schema import (
    EmailResultResponse,
    GetTicketResponse,
    IssueTicketRequest,
    IssueTicketResponse,
    TicketResponse,
    TicketTypeResponse,
    TicketTypesResponse,
    ValidateTicketRequest,
    ValidateTicketResponse,
)
from src.service.shared_kernel.domain.value_object.ticket_token import (
    extract_token,
    is_valid_token,
)


router = APIRouter()


@router.post('/validate', response_model_exclude_none=True)
@Logger.io
async def validate_ticket(
    request: ValidateTicketRequest,
    bearer: str = Depends(require_scanner_bearer),
    authorize_use_case: AuthorizeScannerUseCase = Depends(AuthorizeScannerUseCase.depends),
    redeem_use_case: RedeemTicketUseCase = Depends(RedeemTicketUseCase.depends),
) -> ValidateTicketResponse:
    """Scanner entry point: VALID admits, anything else turns the guest away."""
    raw_token = (request.token or '').strip()
    if not raw_token:
        raise DomainError('Missing ticketId')

    event_id = (request.event_id or '').strip().lower() or None
    authorized = await authorize_use_case.authorize(bearer=bearer, event_id=event_id)
    if isinstance(authorized, Err):
        raise_for_err(authorized)

    outcome = await redeem_use_case.redeem(token=extract_token(raw_token), key=authorized.value)
    return ValidateTicketResponse(
        status=outcome.status,
        ticket=TicketResponse.from_view(outcome.ticket) if outcome.ticket else None,
    )


@router.post('/issue', dependencies=[Depends(require_issue_key)], response_model_exclude_none=True)
@Logger.io
async def issue_ticket(
    request: IssueTicketRequest,
    http_request: Request,
    use_case: IssueTicketUseCase = Depends(IssueTicketUseCase.depends),
) -> IssueTicketResponse:
    issued = await use_case.issue(
        ticket_type_id=request.ticket_type_id,
        email=request.email,
        name=request.name,
        link_only=True if request.link_only is None else request.link_only,
        skip_email=bool(request.skip_email),
        origin=str(http_request.base_url),
    )
    return IssueTicketResponse(
        ticket_id=issued.ticket.id,
        ticket_url=issued.ticket_url,
        issued_at=issued.ticket.issued_at,
        email=EmailResultResponse(**issued.email_result.to_dict()),
    )


@router.get('/types')
@Logger.io
async def list_ticket_types(
    use_case: ListTicketTypesUseCase = Depends(ListTicketTypesUseCase.depends),
) -> TicketTypesResponse:
    ticket_types = await use_case.list_types()
    return TicketTypesResponse(types=[TicketTypeResponse.from_entity(t) for t in ticket_types])


@router.get('/get', response_model_exclude_none=True)
@Logger.io
async def get_ticket(
    id: Optional[str] = Query(default=None),
    use_case: GetTicketUseCase = Depends(GetTicketUseCase.depends),
) -> GetTicketResponse:
    ticket = await use_case.get_ticket(ticket_id=id)
    return GetTicketResponse(ticket=TicketResponse.from_view(ticket))


@router.get('/qr')
@inject
async def ticket_qr(
    id: Optional[str] = Query(default=None),
    qr_code_generator: IQrCodeGenerator = Depends(Provide[Container.qr_code_generator]),
) -> Response:
    ticket_id = (id or '').strip()
    if not ticket_id:
        raise DomainError('Missing query param: id')
    if not is_valid_token(ticket_id):
        raise DomainError('Invalid id (expected UUID)')

    return Response(
        content=qr_code_generator.png(ticket_id.lower()),
        media_type='image/png',
        # ids are immutable; short cache in case the QR format changes
        headers={'Cache-Control': 'public, max-age=300, s-maxage=300'},
    )
