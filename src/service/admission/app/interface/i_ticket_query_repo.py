from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.admission.domain.entity.ticket_entity import TicketView


class ITicketQueryRepo(ABC):
    @abstractmethod
    async def get_view(
        self, *, ticket_id: str, event_id: Optional[str] = None
    ) -> Optional[TicketView]:
        """Ticket joined with type/event; restricted to `event_id` when given."""

    @abstractmethod
    async def list_by_email(self, *, email: str, limit: int) -> List[TicketView]:
        pass

    @abstractmethod
    async def list_used(self, *, event_id: Optional[str], limit: int) -> List[TicketView]:
        pass
