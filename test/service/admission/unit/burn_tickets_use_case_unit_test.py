from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import DomainError
from src.service.admission.app.command.burn_tickets_use_case import (
    BurnTicketsUseCase,
    normalize_ticket_ids,
)
from src.service.admission.app.interface.i_ticket_command_repo import ITicketCommandRepo


A = '9a3c5b1e-0d2f-4e6a-8b7c-1d2e3f4a5b6c'
B = '1b2c3d4e-5f60-4718-9a2b-3c4d5e6f7a8b'


@pytest.mark.unit
class TestNormalizeTicketIds:
    def test_trims_lowercases_and_dedupes_in_order(self) -> None:
        assert normalize_ticket_ids([f' {B.upper()} ', A, B, None, '', 'nope']) == [B, A]

    def test_nothing_valid(self) -> None:
        assert normalize_ticket_ids([None, '  ', 'ticket-1']) == []

    def test_non_string_entries_are_dropped(self) -> None:
        assert normalize_ticket_ids([42, A, {'id': B}, [B], True]) == [A]


@pytest.mark.unit
class TestBurnTickets:
    async def test_burns_normalized_ids(self) -> None:
        repo = AsyncMock(spec=ITicketCommandRepo)
        repo.force_burn.return_value = 1

        outcome = await BurnTicketsUseCase(repo).burn(raw_ids=[A, A.upper(), 'junk'])

        assert outcome.burned == 1
        assert outcome.ticket_ids == [A]
        call = repo.force_burn.await_args
        assert call.kwargs['ticket_ids'] == [A]
        assert call.kwargs['burned_at'].tzinfo is not None

    async def test_no_valid_ids_is_rejected(self) -> None:
        repo = AsyncMock(spec=ITicketCommandRepo)

        with pytest.raises(DomainError, match='Missing ticketId'):
            await BurnTicketsUseCase(repo).burn(raw_ids=['junk', None])

        repo.force_burn.assert_not_awaited()
