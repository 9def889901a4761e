from datetime import datetime
from typing import Optional

import attrs


@attrs.define(frozen=True)
class TicketType:
    id: str
    event_id: str
    name: str
    price: int = 0
    event_name: Optional[str] = None
    starts_at: Optional[datetime] = None
    venue: Optional[str] = None
