from datetime import datetime, timezone
from typing import Any, Optional

import attrs

from src.service.campaign.domain.value_object.campaign_plan import PendingRecipient
from src.service.campaign.domain.value_object.remote_ticket import IssueReceipt


_ALWAYS_PRESENT = frozenset({'ok', 'timestamp', 'email', 'name', 'ticket_type'})


@attrs.frozen
class LedgerRecord:
    """
    One line of the campaign ledger.

    A record with ok=True means a ticket exists for `email`; replays never
    send to that address again, whatever `email_result` says.
    """

    ok: bool
    timestamp: str
    email: str
    name: Optional[str]
    ticket_type: str
    ticket_id: Optional[str] = None
    ticket_url: Optional[str] = None
    email_result: Optional[dict[str, Any]] = None
    status: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def success(
        cls, *, recipient: PendingRecipient, receipt: IssueReceipt, at: Optional[datetime] = None
    ) -> 'LedgerRecord':
        return cls(
            ok=True,
            timestamp=_iso(at),
            email=recipient.email,
            name=recipient.name,
            ticket_type=recipient.ticket_type,
            ticket_id=receipt.ticket_id,
            ticket_url=receipt.ticket_url,
            email_result=receipt.email_result,
        )

    @classmethod
    def failure(
        cls,
        *,
        recipient: PendingRecipient,
        error: str,
        status: Optional[int] = None,
        at: Optional[datetime] = None,
    ) -> 'LedgerRecord':
        return cls(
            ok=False,
            timestamp=_iso(at),
            email=recipient.email,
            name=recipient.name,
            ticket_type=recipient.ticket_type,
            status=status,
            error=error,
        )

    @classmethod
    def resent(cls, *, source: 'LedgerRecord', receipt: IssueReceipt) -> 'LedgerRecord':
        sent = receipt.email_sent
        return attrs.evolve(
            source,
            ok=sent,
            timestamp=_iso(None),
            ticket_url=receipt.ticket_url or source.ticket_url,
            email_result=receipt.email_result,
            status=None,
            error=None if sent else str(receipt.email_result.get('error') or 'Email not sent'),
        )

    @classmethod
    def resend_failed(
        cls, *, source: 'LedgerRecord', error: str, status: Optional[int] = None
    ) -> 'LedgerRecord':
        return attrs.evolve(
            source, ok=False, timestamp=_iso(None), email_result=None, status=status, error=error
        )

    @classmethod
    def from_dict(cls, entry: Any) -> Optional['LedgerRecord']:
        """Rebuild a record read back from disk; None for anything unrecognizable."""
        if not isinstance(entry, dict) or not isinstance(entry.get('ok'), bool):
            return None
        email = entry.get('email')
        if not isinstance(email, str) or not email.strip():
            return None
        email_result = entry.get('email_result')
        status = entry.get('status')
        return cls(
            ok=entry['ok'],
            timestamp=str(entry.get('timestamp') or ''),
            email=email.strip(),
            name=_optional_str(entry.get('name')),
            ticket_type=str(entry.get('ticket_type') or ''),
            ticket_id=_optional_str(entry.get('ticket_id')),
            ticket_url=_optional_str(entry.get('ticket_url')),
            email_result=email_result if isinstance(email_result, dict) else None,
            status=status if isinstance(status, int) else None,
            error=_optional_str(entry.get('error')),
        )

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self, filter=_keep_field)


def _keep_field(attribute: attrs.Attribute, value: Any) -> bool:
    return attribute.name in _ALWAYS_PRESENT or value is not None


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value not in (None, '') else None


def _iso(at: Optional[datetime]) -> str:
    return (at or datetime.now(timezone.utc)).isoformat()
