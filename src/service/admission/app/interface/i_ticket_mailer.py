from abc import ABC, abstractmethod
from typing import Optional

from src.service.admission.domain.entity.ticket_entity import Ticket
from src.service.admission.domain.entity.ticket_type_entity import TicketType
from src.service.admission.domain.value_object.email_delivery import EmailDeliveryResult


class ITicketMailer(ABC):
    @abstractmethod
    async def send_ticket(
        self,
        *,
        ticket: Ticket,
        ticket_type: TicketType,
        ticket_url: str,
        qr_png: Optional[bytes] = None,
    ) -> EmailDeliveryResult:
        """Deliver the ticket link. Never raises for transport problems;
        they come back as a failed EmailDeliveryResult."""
