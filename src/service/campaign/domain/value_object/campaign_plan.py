from collections import Counter
from typing import Any, Optional

import attrs

from src.service.campaign.domain.enum.skip_reason import SkipReason


@attrs.frozen
class PendingRecipient:
    row_number: int
    email: str
    name: Optional[str]
    ticket_type_id: str
    ticket_type: str

    def preview(self) -> dict[str, Any]:
        return {'email': self.email, 'name': self.name, 'ticket_type': self.ticket_type}


@attrs.frozen
class SkippedRecipient:
    row_number: int
    email: str
    reason: SkipReason
    detail: Optional[str] = None


@attrs.define
class CampaignPlan:
    """The recipients a run would attempt, in source order, and why the rest were left out."""

    pending: list[PendingRecipient] = attrs.field(factory=list)
    skipped: list[SkippedRecipient] = attrs.field(factory=list)
    eligible: int = 0
    deferred: int = 0
    # Eligible rows matching the single-recipient filter; None when no filter is set
    filter_matches: Optional[int] = None

    def skip_counts(self) -> dict[str, int]:
        return dict(Counter(s.reason.value for s in self.skipped))

    def summary(self, *, sample_size: int = 10) -> dict[str, Any]:
        return {
            'eligible': self.eligible,
            'pending': len(self.pending),
            'deferred': self.deferred,
            'skipped': self.skip_counts(),
            'sample': [p.preview() for p in self.pending[:sample_size]],
        }


@attrs.frozen
class FailedRecipient:
    email: str
    error: str
    status: Optional[int] = None


@attrs.define
class CampaignReport:
    attempted: int = 0
    sent: int = 0
    email_not_sent: int = 0
    failures: list[FailedRecipient] = attrs.field(factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> dict[str, Any]:
        return {
            'ok': self.ok,
            'attempted': self.attempted,
            'sent': self.sent,
            'email_not_sent': self.email_not_sent,
            'failed': [attrs.asdict(f) for f in self.failures],
        }
