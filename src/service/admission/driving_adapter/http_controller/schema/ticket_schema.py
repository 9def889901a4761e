from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.service.admission.domain.entity.ticket_entity import TicketView
from src.service.admission.domain.entity.ticket_type_entity import TicketType
from src.service.admission.domain.enum.redemption_status import RedemptionStatus


_TRUE_WORDS = frozenset({'1', 'true', 'yes', 'y', 'on'})
_FALSE_WORDS = frozenset({'0', 'false', 'no', 'n', 'off'})


def parse_loose_bool(value: Any) -> Optional[bool]:
    """JSON booleans, 0/1 and yes/no style strings; anything else is None."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


LooseBool = Annotated[Optional[bool], BeforeValidator(parse_loose_bool)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValidateTicketRequest(CamelModel):
    token: Optional[str] = Field(default=None, validation_alias=AliasChoices('token', 'ticketId'))
    event_id: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={'example': {'token': '0b6f7c3e-6a59-4a8e-9d3b-5a2f1f0c9e11'}},
    )


class IssueTicketRequest(CamelModel):
    ticket_type_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    link_only: LooseBool = None
    skip_email: LooseBool = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            'example': {
                'ticketTypeId': '5f0e2a8c-3b1d-4c6e-8f7a-9b0c1d2e3f40',
                'email': 'gestur@example.is',
                'name': 'Jón Jónsson',
                'linkOnly': True,
            }
        },
    )


class TicketResponse(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    used: bool
    used_at: Optional[datetime] = None
    issued_at: Optional[datetime] = None
    ticket_type_id: str
    ticket_type: str
    price: int
    event_id: str
    event_name: str
    starts_at: Optional[datetime] = None
    venue: Optional[str] = None
    scanned_by: Optional[str] = None

    @classmethod
    def from_view(cls, view: TicketView) -> 'TicketResponse':
        return cls(**view.to_dict())


class ValidateTicketResponse(CamelModel):
    ok: bool = True
    status: RedemptionStatus
    ticket: Optional[TicketResponse] = None


class EmailResultResponse(CamelModel):
    ok: bool
    id: Optional[str] = None
    error: Optional[str] = None
    skipped: Optional[bool] = None


class IssueTicketResponse(CamelModel):
    ok: bool = True
    ticket_id: str
    ticket_url: str
    issued_at: Optional[datetime] = None
    email: EmailResultResponse


class GetTicketResponse(CamelModel):
    ok: bool = True
    ticket: TicketResponse


class TicketTypeResponse(CamelModel):
    id: str
    event_id: str
    name: str
    price: int
    event_name: Optional[str] = None
    starts_at: Optional[datetime] = None
    venue: Optional[str] = None

    @classmethod
    def from_entity(cls, ticket_type: TicketType) -> 'TicketTypeResponse':
        return cls(
            id=ticket_type.id,
            event_id=ticket_type.event_id,
            name=ticket_type.name,
            price=ticket_type.price,
            event_name=ticket_type.event_name,
            starts_at=ticket_type.starts_at,
            venue=ticket_type.venue,
        )


class TicketTypesResponse(CamelModel):
    ok: bool = True
    types: List[TicketTypeResponse]
