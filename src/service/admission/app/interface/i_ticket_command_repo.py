from abc import ABC, abstractmethod
from datetime import datetime

from src.service.admission.domain.entity.ticket_entity import Ticket


class ITicketCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, ticket: Ticket) -> Ticket:
        pass

    @abstractmethod
    async def mark_used(
        self, *, ticket_id: str, event_id: str, scanner_key_id: str, used_at: datetime
    ) -> bool:
        """
        Conditionally flip an unused ticket of `event_id` to used.

        Must be a single compare-and-swap statement against the store.
        Returns True only for the caller whose statement changed the row.
        """

    @abstractmethod
    async def force_burn(self, *, ticket_ids: list[str], burned_at: datetime) -> int:
        """Mark every listed ticket used, clearing the scanner key on tickets
        that were still unused. Returns the number of existing tickets hit."""
