from abc import ABC, abstractmethod
from typing import List, Optional

from src.platform.types.result import Result
from src.service.campaign.domain.value_object.remote_ticket import (
    IssueReceipt,
    RemoteTicket,
    TicketTypeOption,
)


class ITicketsApiClient(ABC):
    """Remote view of the tickets service; transient failures are retried inside."""

    @abstractmethod
    async def list_types(self) -> Result[List[TicketTypeOption]]:
        pass

    @abstractmethod
    async def issue(
        self,
        *,
        ticket_type_id: str,
        email: str,
        name: Optional[str] = None,
        link_only: bool = True,
    ) -> Result[IssueReceipt]:
        pass

    @abstractmethod
    async def resend(self, *, ticket_id: str, link_only: bool = True) -> Result[IssueReceipt]:
        """Mail an existing ticket's link again (admin route)."""

    @abstractmethod
    async def list_by_email(self, *, email: str, limit: int = 200) -> Result[List[RemoteTicket]]:
        pass

    @abstractmethod
    async def burn(self, *, ticket_ids: List[str]) -> Result[int]:
        pass
