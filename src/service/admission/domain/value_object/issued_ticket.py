import attrs

from src.service.admission.domain.entity.ticket_entity import Ticket
from src.service.admission.domain.value_object.email_delivery import EmailDeliveryResult


@attrs.define(frozen=True)
class IssuedTicket:
    ticket: Ticket
    ticket_url: str
    email_result: EmailDeliveryResult
