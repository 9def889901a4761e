from datetime import datetime, timezone
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.admission.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.admission.domain.entity.scanner_key_entity import ScannerKey
from src.service.admission.domain.enum.redemption_status import RedemptionStatus
from src.service.admission.domain.value_object.redemption_outcome import RedemptionOutcome
from src.service.shared_kernel.domain.value_object.ticket_token import is_valid_token


class RedeemTicketUseCase:
    """
    Redeem a scanned ticket exactly once.

    The transition UNUSED -> USED is one conditional UPDATE scoped to the
    key's event; whichever concurrent scan's statement changes the row wins
    and every other scan sees ALREADY_USED. The follow-up read only enriches
    the response and never writes.
    """

    def __init__(
        self,
        *,
        ticket_command_repo: ITicketCommandRepo,
        ticket_query_repo: ITicketQueryRepo,
    ) -> None:
        self.ticket_command_repo = ticket_command_repo
        self.ticket_query_repo = ticket_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_command_repo: ITicketCommandRepo = Depends(Provide[Container.ticket_command_repo]),
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
    ) -> Self:
        return cls(ticket_command_repo=ticket_command_repo, ticket_query_repo=ticket_query_repo)

    @Logger.io
    async def redeem(self, *, token: Optional[str], key: ScannerKey) -> RedemptionOutcome:
        if not is_valid_token(token):
            return RedemptionOutcome.not_found()
        assert token is not None

        won = await self.ticket_command_repo.mark_used(
            ticket_id=token,
            event_id=key.event_id,
            scanner_key_id=key.id,
            used_at=datetime.now(timezone.utc),
        )
        ticket = await self.ticket_query_repo.get_view(ticket_id=token, event_id=key.event_id)

        if ticket is None:
            return RedemptionOutcome.not_found()
        if won:
            Logger.base.info(f'🎟️  [Redeem] {token} admitted by key {key.label or key.id}')
            return RedemptionOutcome(status=RedemptionStatus.VALID, ticket=ticket)
        return RedemptionOutcome(status=RedemptionStatus.ALREADY_USED, ticket=ticket)
