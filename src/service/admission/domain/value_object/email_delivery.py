from typing import Any, Optional

import attrs


@attrs.define(frozen=True)
class EmailDeliveryResult:
    """
    Outcome of the best-effort notification sent after a ticket is issued.

    `ok=False` never means the ticket is missing: the ticket row is committed
    before delivery is attempted. `skipped=True` marks a send that was not
    attempted at all (caller opted out, or SMTP is not configured).
    """

    ok: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    skipped: bool = False

    @classmethod
    def sent(cls, message_id: str) -> 'EmailDeliveryResult':
        return cls(ok=True, message_id=message_id)

    @classmethod
    def skipped_by_request(cls) -> 'EmailDeliveryResult':
        return cls(ok=False, error='Skipped', skipped=True)

    @classmethod
    def not_configured(cls, error: str) -> 'EmailDeliveryResult':
        return cls(ok=False, error=error, skipped=True)

    @classmethod
    def failed(cls, error: str) -> 'EmailDeliveryResult':
        return cls(ok=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {'ok': True, 'id': self.message_id}
        body: dict[str, Any] = {'ok': False, 'error': self.error}
        if self.skipped:
            body['skipped'] = True
        return body
