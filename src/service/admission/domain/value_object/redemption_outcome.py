from typing import Any, Optional

import attrs

from src.service.admission.domain.entity.ticket_entity import TicketView
from src.service.admission.domain.enum.redemption_status import RedemptionStatus


@attrs.define(frozen=True)
class RedemptionOutcome:
    status: RedemptionStatus
    ticket: Optional[TicketView] = None

    @classmethod
    def not_found(cls) -> 'RedemptionOutcome':
        return cls(status=RedemptionStatus.NOT_FOUND)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {'ok': True, 'status': self.status.value}
        if self.ticket is not None:
            body['ticket'] = self.ticket.to_dict()
        return body


@attrs.define(frozen=True)
class BurnOutcome:
    burned: int
    ticket_ids: list[str] = attrs.field(factory=list)
