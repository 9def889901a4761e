import re
from typing import Awaitable, Callable, Iterable, List, Optional

import anyio
import attrs

from src.platform.logging.loguru_io import Logger
from src.platform.types.result import Err, Ok, Result
from src.service.campaign.app.interface.i_campaign_ledger import ICampaignLedger
from src.service.campaign.app.interface.i_tickets_api_client import ITicketsApiClient
from src.service.campaign.domain.entity.recipient_row import RecipientRow
from src.service.campaign.domain.enum.skip_reason import SkipReason
from src.service.campaign.domain.ticket_type_resolver import TicketTypeResolver, normalize_key
from src.service.campaign.domain.value_object.campaign_plan import (
    CampaignPlan,
    CampaignReport,
    FailedRecipient,
    PendingRecipient,
    SkippedRecipient,
)
from src.service.campaign.domain.value_object.ledger_record import LedgerRecord
from src.service.campaign.domain.value_object.remote_ticket import TicketTypeOption
from src.service.shared_kernel.domain.value_object.ticket_token import is_valid_token


_EMAIL_SHAPE = re.compile(r'.+@.+\..+')
_LIST_SEPARATORS = re.compile(r'[,\s]+')

PAID_WORDS = frozenset({'ja', 'j', 'yes', 'y', 'true', '1'})


def normalize_email(value: Optional[str]) -> str:
    return (value or '').strip().lower()


def is_plausible_email(email: str) -> bool:
    return _EMAIL_SHAPE.fullmatch(email) is not None


def parse_email_list(values: Iterable[str]) -> frozenset[str]:
    """Flatten repeated, comma- or space-separated email options."""
    emails = set()
    for value in values:
        emails.update(normalize_email(e) for e in _LIST_SEPARATORS.split(value or '') if e)
    return frozenset(emails)


@attrs.frozen
class CampaignOptions:
    only_paid: bool = True
    skip: frozenset[str] = frozenset()
    only_email: Optional[str] = None
    # 0 means no cap
    max_count: int = 0
    link_only: bool = True
    delay: float = 0.8
    failure_delay: float = 0.5


class BulkIssueUseCase:
    """
    Turn a recipient export into a resumable sequence of issue calls.

    `plan` is pure: it filters, resolves and dedupes rows against a snapshot
    of the ledger. `run` sends the pending rows one at a time and appends
    exactly one ledger record per attempt before moving on, so a crash or a
    rerun never issues a second ticket to an address already recorded as sent.
    """

    def __init__(
        self,
        *,
        api_client: ITicketsApiClient,
        ledger: ICampaignLedger,
        options: CampaignOptions = CampaignOptions(),
        sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
    ) -> None:
        self.api_client = api_client
        self.ledger = ledger
        self.options = options
        self._sleep = sleep

    async def prepare(self, rows: List[RecipientRow]) -> Result[CampaignPlan]:
        types = await self.api_client.list_types()
        if isinstance(types, Err):
            Logger.base.error(f'❌ [Campaign] Failed to fetch ticket types: {types.detail}')
            return types

        Logger.base.info(f'🎟️  [Campaign] {len(types.value)} ticket types available')
        return Ok(
            self.plan(
                rows,
                resolver=TicketTypeResolver(types.value),
                already_sent=self.ledger.sent_emails(),
            )
        )

    def plan(
        self,
        rows: Iterable[RecipientRow],
        *,
        resolver: TicketTypeResolver,
        already_sent: Iterable[str] = (),
    ) -> CampaignPlan:
        options = self.options
        only_email = normalize_email(options.only_email) or None
        sent = {normalize_email(e) for e in already_sent}
        plan = CampaignPlan(filter_matches=0 if only_email else None)
        seen: set[str] = set()
        eligible: List[PendingRecipient] = []

        for row in rows:
            email = normalize_email(row.email)
            if only_email is not None and email != only_email:
                continue

            screened = self._screen(row, email=email, resolver=resolver)
            if isinstance(screened, SkippedRecipient):
                plan.skipped.append(screened)
                continue
            if email in seen:
                plan.skipped.append(SkippedRecipient(row.row_number, email, SkipReason.DUPLICATE))
                continue
            seen.add(email)
            eligible.append(screened)
            if only_email is not None:
                plan.filter_matches = (plan.filter_matches or 0) + 1

        plan.eligible = len(eligible)
        pending = []
        for recipient in eligible:
            if recipient.email in sent:
                plan.skipped.append(
                    SkippedRecipient(recipient.row_number, recipient.email, SkipReason.ALREADY_SENT)
                )
            else:
                pending.append(recipient)

        if options.max_count > 0 and len(pending) > options.max_count:
            plan.deferred = len(pending) - options.max_count
            pending = pending[: options.max_count]
        plan.pending = pending
        return plan

    def _screen(
        self, row: RecipientRow, *, email: str, resolver: TicketTypeResolver
    ) -> PendingRecipient | SkippedRecipient:
        options = self.options
        if not is_plausible_email(email):
            return SkippedRecipient(row.row_number, email, SkipReason.INVALID_EMAIL, row.email or None)
        if email in options.skip:
            return SkippedRecipient(row.row_number, email, SkipReason.SKIPPED)
        if options.only_paid and row.paid is not None and normalize_key(row.paid) not in PAID_WORDS:
            return SkippedRecipient(row.row_number, email, SkipReason.NOT_PAID, row.paid or None)

        option = self._resolve_type(row, resolver)
        if option is None:
            return SkippedRecipient(
                row.row_number, email, SkipReason.UNKNOWN_TYPE, row.ticket_type_id or row.type_text
            )
        return PendingRecipient(
            row_number=row.row_number,
            email=email,
            name=row.name,
            ticket_type_id=option.id,
            ticket_type=option.name,
        )

    @staticmethod
    def _resolve_type(
        row: RecipientRow, resolver: TicketTypeResolver
    ) -> Optional[TicketTypeOption]:
        if row.ticket_type_id:
            type_id = row.ticket_type_id.strip().lower()
            known = resolver.by_id(type_id)
            if known is not None:
                return known
            # Unknown to the listing but well formed; the issue endpoint decides
            if is_valid_token(type_id):
                return TicketTypeOption(id=type_id, name=row.type_text or type_id)
            return None
        return resolver.resolve_option(row.type_text)

    async def run(self, plan: CampaignPlan) -> CampaignReport:
        report = CampaignReport()
        total = len(plan.pending)
        pause = 0.0

        for position, recipient in enumerate(plan.pending, start=1):
            if position > 1 and pause > 0:
                await self._sleep(pause)

            # Another run may have reached this address since the plan was made
            if self.ledger.has_succeeded(recipient.email):
                Logger.base.info(f'⏭️  [Campaign] [{position}/{total}] Already sent: {recipient.email}')
                pause = 0.0
                continue

            report.attempted += 1
            result = await self.api_client.issue(
                ticket_type_id=recipient.ticket_type_id,
                email=recipient.email,
                name=recipient.name,
                link_only=self.options.link_only,
            )

            if isinstance(result, Err):
                self.ledger.append(
                    LedgerRecord.failure(recipient=recipient, error=result.detail, status=result.status)
                )
                report.failures.append(
                    FailedRecipient(email=recipient.email, error=result.detail, status=result.status)
                )
                Logger.base.error(
                    f'❌ [Campaign] [{position}/{total}] Failed: {recipient.email} '
                    f'({result.status or "-"}) {result.detail}'
                )
                pause = max(self.options.failure_delay, self.options.delay)
                continue

            receipt = result.value
            self.ledger.append(LedgerRecord.success(recipient=recipient, receipt=receipt))
            report.sent += 1
            if receipt.email_sent:
                Logger.base.info(
                    f'✉️  [Campaign] [{position}/{total}] Sent: {recipient.email} -> {receipt.ticket_url}'
                )
            else:
                report.email_not_sent += 1
                Logger.base.warning(
                    f'📭 [Campaign] [{position}/{total}] Issued without email: {recipient.email} '
                    f'-> {receipt.ticket_url} ({receipt.email_result.get("error")})'
                )
            pause = self.options.delay

        Logger.base.info(
            f'🏁 [Campaign] attempted={report.attempted} sent={report.sent} '
            f'failed={len(report.failures)}'
        )
        return report
