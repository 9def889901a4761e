from typing import Any, List, Optional

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from src.service.admission.driving_adapter.http_controller.schema.ticket_schema import (
    CamelModel,
    LooseBool,
    TicketResponse,
)


class BurnTicketsRequest(CamelModel):
    # entries are screened by normalize_ticket_ids, not here
    ticket_id: Any = None
    ticket_ids: Optional[List[Any]] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            'example': {
                'ticketIds': [
                    '0b6f7c3e-6a59-4a8e-9d3b-5a2f1f0c9e11',
                    '7d1e0c55-2f0b-4f7e-a3c2-1e9b8d7c6a50',
                ]
            }
        },
    )

    def requested_ids(self) -> List[Any]:
        if self.ticket_ids is not None:
            return list(self.ticket_ids)
        return [self.ticket_id] if self.ticket_id else []


class ResendTicketRequest(CamelModel):
    ticket_id: Optional[str] = None
    link_only: LooseBool = None


class BurnTicketsResponse(CamelModel):
    ok: bool = True
    burned: int
    rows: List[str]


class TicketsByEmailRequest(CamelModel):
    email: Optional[str] = None
    limit: Optional[int] = None


class TicketsByEmailResponse(CamelModel):
    ok: bool = True
    tickets: List[TicketResponse]


class AttendanceResponse(CamelModel):
    ok: bool = True
    rows: List[TicketResponse]
