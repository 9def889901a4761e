from datetime import datetime, timezone
from typing import Any, Iterable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.admission.domain.value_object.redemption_outcome import BurnOutcome
from src.service.shared_kernel.domain.value_object.ticket_token import is_valid_token


def normalize_ticket_ids(raw_ids: Iterable[Any]) -> list[str]:
    """Trim, drop anything that is not a canonical token string, dedupe keeping order."""
    seen: dict[str, None] = {}
    for raw in raw_ids:
        if not isinstance(raw, str):
            continue
        candidate = raw.strip().lower()
        if is_valid_token(candidate):
            seen.setdefault(candidate, None)
    return list(seen)


class BurnTicketsUseCase:
    def __init__(self, ticket_command_repo: ITicketCommandRepo) -> None:
        self.ticket_command_repo = ticket_command_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_command_repo: ITicketCommandRepo = Depends(Provide[Container.ticket_command_repo]),
    ) -> Self:
        return cls(ticket_command_repo=ticket_command_repo)

    @Logger.io
    async def burn(self, *, raw_ids: Iterable[Any]) -> BurnOutcome:
        ticket_ids = normalize_ticket_ids(raw_ids)
        if not ticket_ids:
            raise DomainError('Missing ticketId(s)')

        burned = await self.ticket_command_repo.force_burn(
            ticket_ids=ticket_ids, burned_at=datetime.now(timezone.utc)
        )
        Logger.base.info(f'🔥 [Burn] {burned}/{len(ticket_ids)} tickets burned')
        return BurnOutcome(burned=burned, ticket_ids=ticket_ids)
