from typing import Any, Iterable, List, Optional

import attrs

from src.platform.logging.loguru_io import Logger
from src.platform.types.result import Err
from src.service.campaign.app.command.bulk_issue_use_case import normalize_email
from src.service.campaign.app.interface.i_tickets_api_client import ITicketsApiClient


@attrs.frozen
class DuplicateBurnOutcome:
    email: str
    keep_id: Optional[str] = None
    to_burn: tuple[str, ...] = ()
    burned: int = 0
    dry_run: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        data = attrs.asdict(self)
        data['to_burn'] = list(self.to_burn)
        return data


class BurnDuplicatesUseCase:
    """
    Leave each address with a single live ticket.

    Unused tickets beyond the one kept are burned through the admin API, so
    the scanner reports them as ALREADY_USED.
    """

    def __init__(self, *, api_client: ITicketsApiClient) -> None:
        self.api_client = api_client

    async def run(
        self, *, emails: Iterable[str], keep_id: Optional[str] = None, dry_run: bool = False
    ) -> List[DuplicateBurnOutcome]:
        keep_id = (keep_id or '').strip().lower() or None
        outcomes: List[DuplicateBurnOutcome] = []
        seen: set[str] = set()

        for raw_email in emails:
            email = normalize_email(raw_email)
            if not email or email in seen:
                continue
            seen.add(email)
            outcome = await self._burn_for(email, keep_id=keep_id, dry_run=dry_run)
            outcomes.append(outcome)

        return outcomes

    async def _burn_for(
        self, email: str, *, keep_id: Optional[str], dry_run: bool
    ) -> DuplicateBurnOutcome:
        listed = await self.api_client.list_by_email(email=email, limit=200)
        if isinstance(listed, Err):
            Logger.base.error(f'❌ [Dedupe] List failed for {email}: {listed.detail}')
            return DuplicateBurnOutcome(email=email, error=listed.detail)

        unused = [t for t in listed.value if not t.used]
        if len(unused) <= 1:
            return DuplicateBurnOutcome(
                email=email, keep_id=unused[0].id if unused else None, dry_run=dry_run
            )

        unused_ids = {t.id for t in unused}
        if keep_id in unused_ids:
            kept = keep_id
        else:
            kept = max(unused, key=lambda t: t.issued_instant).id
        to_burn = tuple(t.id for t in unused if t.id != kept)

        if dry_run:
            Logger.base.info(f'🔍 [Dedupe] {email}: keep {kept}, would burn {len(to_burn)}')
            return DuplicateBurnOutcome(email=email, keep_id=kept, to_burn=to_burn, dry_run=True)

        burned = await self.api_client.burn(ticket_ids=list(to_burn))
        if isinstance(burned, Err):
            Logger.base.error(f'❌ [Dedupe] Burn failed for {email}: {burned.detail}')
            return DuplicateBurnOutcome(
                email=email, keep_id=kept, to_burn=to_burn, error=burned.detail
            )

        Logger.base.info(f'🔥 [Dedupe] {email}: kept {kept}, burned {burned.value}')
        return DuplicateBurnOutcome(
            email=email, keep_id=kept, to_burn=to_burn, burned=burned.value
        )
