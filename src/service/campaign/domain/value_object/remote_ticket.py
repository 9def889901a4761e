from datetime import datetime, timezone
from typing import Any, Optional

import attrs


@attrs.frozen
class TicketTypeOption:
    id: str
    name: str


@attrs.frozen
class IssueReceipt:
    """What the issue endpoint reported for one created ticket."""

    ticket_id: str
    ticket_url: str
    email_result: dict[str, Any] = attrs.field(factory=dict)

    @property
    def email_sent(self) -> bool:
        return self.email_result.get('ok') is True


def _parse_instant(value: Optional[str]) -> datetime:
    try:
        parsed = datetime.fromisoformat(value or '')
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@attrs.frozen
class RemoteTicket:
    id: str
    used: bool
    issued_at: Optional[str] = None

    @property
    def issued_instant(self) -> datetime:
        return _parse_instant(self.issued_at)
