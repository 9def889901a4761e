from typing import Any, Optional

import attrs

from src.platform.logging.loguru_io import Logger
from src.platform.types.result import Err, ErrorKind, Ok, Result
from src.service.campaign.app.command.bulk_issue_use_case import (
    is_plausible_email,
    normalize_email,
)
from src.service.campaign.app.interface.i_tickets_api_client import ITicketsApiClient
from src.service.campaign.domain.ticket_type_resolver import TicketTypeResolver
from src.service.campaign.domain.value_object.remote_ticket import IssueReceipt, TicketTypeOption
from src.service.shared_kernel.domain.value_object.ticket_token import is_valid_token


DEFAULT_TYPE_TEXT = 'Matur + ball'


@attrs.frozen
class IssuedOne:
    email: str
    ticket_type: TicketTypeOption
    receipt: IssueReceipt

    def to_dict(self) -> dict[str, Any]:
        return {
            'ok': True,
            'email': self.email,
            'ticket_type': self.ticket_type.name,
            'ticket_id': self.receipt.ticket_id,
            'ticket_url': self.receipt.ticket_url,
            'email_result': self.receipt.email_result,
        }


class IssueOneUseCase:
    """Issue a single ticket by type name (or id), outside any campaign ledger."""

    def __init__(self, *, api_client: ITicketsApiClient) -> None:
        self.api_client = api_client

    async def issue(
        self,
        *,
        email: str,
        name: Optional[str] = None,
        type_text: str = DEFAULT_TYPE_TEXT,
        link_only: bool = True,
    ) -> Result[IssuedOne]:
        email = normalize_email(email)
        if not is_plausible_email(email):
            return Err(ErrorKind.VALIDATION, f'Invalid email: {email!r}')

        types = await self.api_client.list_types()
        if isinstance(types, Err):
            return Err(types.kind, f'Failed to fetch ticket types: {types.detail}', types.status)

        option = self._resolve(TicketTypeResolver(types.value), type_text)
        if option is None:
            available = ', '.join(sorted({t.name for t in types.value}))
            return Err(
                ErrorKind.VALIDATION,
                f'No ticket type matches {type_text!r}. Available: {available}',
            )

        issued = await self.api_client.issue(
            ticket_type_id=option.id,
            email=email,
            name=(name or '').strip() or None,
            link_only=link_only,
        )
        if isinstance(issued, Err):
            Logger.base.error(f'❌ [IssueOne] {email}: {issued.detail}')
            return issued

        Logger.base.info(f'🎫 [IssueOne] {issued.value.ticket_id} ({option.name}) for {email}')
        return Ok(IssuedOne(email=email, ticket_type=option, receipt=issued.value))

    @staticmethod
    def _resolve(resolver: TicketTypeResolver, type_text: str) -> Optional[TicketTypeOption]:
        raw = (type_text or '').strip()
        if is_valid_token(raw):
            return resolver.by_id(raw.lower())
        return resolver.resolve_option(raw)
