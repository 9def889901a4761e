from collections import Counter
from typing import Any, Awaitable, Callable

import anyio
import attrs

from src.platform.logging.loguru_io import Logger
from src.platform.types.result import Err
from src.service.campaign.app.command.bulk_issue_use_case import normalize_email
from src.service.campaign.app.interface.i_campaign_ledger import ICampaignLedger
from src.service.campaign.app.interface.i_tickets_api_client import ITicketsApiClient
from src.service.campaign.domain.enum.skip_reason import SkipReason
from src.service.campaign.domain.value_object.campaign_plan import (
    CampaignReport,
    FailedRecipient,
    SkippedRecipient,
)
from src.service.campaign.domain.value_object.ledger_record import LedgerRecord


@attrs.frozen
class ResendOptions:
    # empty means everyone in the source ledger
    only: frozenset[str] = frozenset()
    skip: frozenset[str] = frozenset()
    only_unsent: bool = False
    link_only: bool = True
    delay: float = 0.8
    failure_delay: float = 0.5


@attrs.define
class ResendPlan:
    pending: list[LedgerRecord] = attrs.field(factory=list)
    skipped: list[SkippedRecipient] = attrs.field(factory=list)

    def skip_counts(self) -> dict[str, int]:
        return dict(Counter(s.reason.value for s in self.skipped))

    def summary(self, *, sample_size: int = 10) -> dict[str, Any]:
        return {
            'pending': len(self.pending),
            'skipped': self.skip_counts(),
            'sample': [
                {'email': r.email, 'ticket_id': r.ticket_id, 'ticket_url': r.ticket_url}
                for r in self.pending[:sample_size]
            ],
        }


class ResendLinksUseCase:
    """
    Mail the links of tickets a campaign already issued, without issuing again.

    Recipients come from the successful records of the campaign ledger. Each
    attempt is written to a separate resend ledger, where ok=True means the
    email actually went out; those addresses are left alone on the next run.
    """

    def __init__(
        self,
        *,
        api_client: ITicketsApiClient,
        source: ICampaignLedger,
        resend_ledger: ICampaignLedger,
        options: ResendOptions = ResendOptions(),
        sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
    ) -> None:
        self.api_client = api_client
        self.source = source
        self.resend_ledger = resend_ledger
        self.options = options
        self._sleep = sleep

    def plan(self) -> ResendPlan:
        options = self.options
        already_resent = self.resend_ledger.sent_emails()
        plan = ResendPlan()

        for record in self.source.successful_records():
            email = normalize_email(record.email)
            reason = None
            if not record.ticket_id:
                reason = SkipReason.NO_TICKET_ID
            elif options.only and email not in options.only:
                reason = SkipReason.NOT_SELECTED
            elif email in options.skip:
                reason = SkipReason.SKIPPED
            elif email in already_resent:
                reason = SkipReason.ALREADY_SENT
            elif options.only_unsent and (record.email_result or {}).get('ok') is True:
                reason = SkipReason.EMAIL_DELIVERED

            if reason is None:
                plan.pending.append(record)
            else:
                plan.skipped.append(SkippedRecipient(0, email, reason))
        return plan

    async def run(self, plan: ResendPlan) -> CampaignReport:
        report = CampaignReport()
        total = len(plan.pending)
        pause = 0.0

        for position, record in enumerate(plan.pending, start=1):
            if position > 1 and pause > 0:
                await self._sleep(pause)

            report.attempted += 1
            result = await self.api_client.resend(
                ticket_id=record.ticket_id or '', link_only=self.options.link_only
            )
            if isinstance(result, Err):
                entry = LedgerRecord.resend_failed(
                    source=record, error=result.detail, status=result.status
                )
            else:
                entry = LedgerRecord.resent(source=record, receipt=result.value)
            self.resend_ledger.append(entry)

            if entry.ok:
                report.sent += 1
                Logger.base.info(f'✉️  [Resend] [{position}/{total}] Sent: {record.email}')
                pause = self.options.delay
                continue

            report.failures.append(
                FailedRecipient(email=record.email, error=entry.error or '', status=entry.status)
            )
            Logger.base.error(
                f'❌ [Resend] [{position}/{total}] Failed: {record.email} '
                f'({entry.status or "-"}) {entry.error}'
            )
            pause = max(self.options.failure_delay, self.options.delay)

        Logger.base.info(
            f'🏁 [Resend] attempted={report.attempted} sent={report.sent} '
            f'failed={len(report.failures)}'
        )
        return report
