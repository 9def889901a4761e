from datetime import datetime
from typing import Any, Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.shared_kernel.domain.value_object.ticket_token import is_valid_token, new_token


@attrs.define
class Ticket:
    """
    Ticket aggregate.

    `used` only ever moves false -> true. A scanner redemption stamps both
    `used_at` and `used_by_scanner_key_id`; an admin burn stamps only
    `used_at`, and only on tickets that were still unused.
    """

    ticket_type_id: str
    email: str
    name: Optional[str] = None
    id: str = attrs.field(factory=new_token)
    used: bool = False
    used_at: Optional[datetime] = None
    used_by_scanner_key_id: Optional[str] = None
    issued_at: Optional[datetime] = None

    @id.validator
    def _check_id(self, attribute: attrs.Attribute, value: str) -> None:
        if not is_valid_token(value):
            raise DomainError(f'Invalid ticket id: {value!r}')

    @classmethod
    def issue(
        cls, *, ticket_type_id: str, email: str, name: Optional[str], issued_at: datetime
    ) -> 'Ticket':
        email = email.strip()
        if not email:
            raise DomainError('Missing ticketTypeId or email')
        return cls(
            ticket_type_id=ticket_type_id,
            email=email,
            name=(name or '').strip() or None,
            issued_at=issued_at,
        )


@attrs.define(frozen=True)
class TicketView:
    """Ticket joined with its type, event and (if scanned) the scanner key label."""

    id: str
    email: str
    name: Optional[str]
    used: bool
    used_at: Optional[datetime]
    issued_at: Optional[datetime]
    ticket_type_id: str
    ticket_type: str
    price: int
    event_id: str
    event_name: str
    starts_at: Optional[datetime] = None
    venue: Optional[str] = None
    scanned_by: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)
