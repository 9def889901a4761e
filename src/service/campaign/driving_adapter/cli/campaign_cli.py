"""
Campaign tooling for the tickets service.

    tickets-campaign bulk-issue --csv responses.csv --base-url https://tickets.example.is
    tickets-campaign burn-duplicates --email someone@example.is --dry-run
    tickets-campaign resend-links --only-unsent
    tickets-campaign issue-one --email someone@example.is --type "Bara ball"

All commands talk to a running service over HTTP. Exit code 1 means at
least one recipient failed (or a single-recipient filter matched no
eligible row).
"""

from pathlib import Path
from typing import Any, Optional, Tuple

import anyio
import click
import orjson

from src.platform.config.core_setting import settings
from src.platform.constant.path import DEFAULT_CAMPAIGN_LEDGER, DEFAULT_RESEND_LEDGER
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.platform.types.result import Err
from src.service.campaign.app.command.bulk_issue_use_case import (
    BulkIssueUseCase,
    CampaignOptions,
    parse_email_list,
)
from src.service.campaign.app.command.burn_duplicates_use_case import BurnDuplicatesUseCase
from src.service.campaign.app.command.issue_one_use_case import DEFAULT_TYPE_TEXT, IssueOneUseCase
from src.service.campaign.app.command.resend_links_use_case import (
    ResendLinksUseCase,
    ResendOptions,
)
from src.service.campaign.driven_adapter.csv_recipient_source import read_recipient_csv
from src.service.campaign.driven_adapter.jsonl_campaign_ledger import JsonlCampaignLedger
from src.service.campaign.driven_adapter.tickets_api_client_impl import TicketsApiClientImpl


DEFAULT_BASE_URL = 'http://localhost:8000'


def _echo_json(data: Any) -> None:
    click.echo(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode())


def _secret_default(value: Any) -> Optional[str]:
    return value.get_secret_value() if value is not None else None


@click.group()
def cli() -> None:
    """Bulk ticket issuance and cleanup against a running tickets service."""


@cli.command('bulk-issue')
@click.option(
    '--csv',
    'csv_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help='Recipient export (CSV with a header row).',
)
@click.option('--base-url', envvar='TICKETS_BASE_URL', default=DEFAULT_BASE_URL, show_default=True)
@click.option(
    '--api-key',
    envvar='ISSUE_API_KEY',
    default=lambda: _secret_default(settings.ISSUE_API_KEY),
    help='Bearer key for /tickets/issue.',
)
@click.option(
    '--delay-ms',
    type=click.IntRange(min=0),
    default=settings.CAMPAIGN_DELAY_MS,
    show_default=True,
)
@click.option(
    '--max-attempts',
    type=click.IntRange(min=1),
    default=settings.CAMPAIGN_MAX_ATTEMPTS,
    show_default=True,
)
@click.option(
    '--base-delay-ms',
    type=click.IntRange(min=0),
    default=settings.CAMPAIGN_BASE_DELAY_MS,
    show_default=True,
)
@click.option(
    '--log',
    'ledger_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CAMPAIGN_LEDGER,
    show_default=True,
    help='Append-only JSONL ledger; successful emails are never sent again.',
)
@click.option('--dry-run', is_flag=True, help='Plan only; no issue calls, no ledger writes.')
@click.option('--skip', multiple=True, help='Emails to leave out (repeatable, comma separated).')
@click.option('--email', 'only_email', default=None, help='Only process this recipient.')
@click.option('--max', 'max_count', type=click.IntRange(min=0), default=0, help='0 = no cap.')
@click.option('--only-paid/--all', default=True, show_default=True)
@click.option('--link-only/--with-qr', default=True, show_default=True)
@click.pass_context
def bulk_issue(
    ctx: click.Context,
    csv_path: Path,
    base_url: str,
    api_key: Optional[str],
    delay_ms: int,
    max_attempts: int,
    base_delay_ms: int,
    ledger_path: Path,
    dry_run: bool,
    skip: Tuple[str, ...],
    only_email: Optional[str],
    max_count: int,
    only_paid: bool,
    link_only: bool,
) -> None:
    """Issue one ticket per eligible recipient in a CSV export."""
    try:
        rows = read_recipient_csv(csv_path)
    except CustomBaseError as e:
        raise click.ClickException(e.message) from e

    options = CampaignOptions(
        only_paid=only_paid,
        skip=parse_email_list(skip),
        only_email=only_email,
        max_count=max_count,
        link_only=link_only,
        delay=delay_ms / 1000,
        failure_delay=max(0.5, delay_ms / 1000),
    )

    async def _run() -> int:
        async with TicketsApiClientImpl(
            base_url=base_url,
            api_key=api_key,
            max_attempts=max_attempts,
            base_delay=base_delay_ms / 1000,
            timeout=settings.CAMPAIGN_HTTP_TIMEOUT,
        ) as api_client:
            use_case = BulkIssueUseCase(
                api_client=api_client, ledger=JsonlCampaignLedger(ledger_path), options=options
            )
            prepared = await use_case.prepare(rows)
            if isinstance(prepared, Err):
                _echo_json({'ok': False, 'error': f'Failed to fetch ticket types: {prepared.detail}'})
                return 1

            plan = prepared.value
            _echo_json(
                {
                    'ok': True,
                    'base_url': base_url,
                    'csv': str(csv_path),
                    'log': str(ledger_path),
                    'dry_run': dry_run,
                    'delay_ms': delay_ms,
                    **plan.summary(),
                }
            )
            if plan.filter_matches == 0:
                Logger.base.error(f'❌ [Campaign] No eligible CSV rows matched --email {only_email}')
                return 1
            if dry_run:
                return 0

            report = await use_case.run(plan)
            _echo_json(report.summary())
            return 0 if report.ok else 1

    ctx.exit(anyio.run(_run))


@cli.command('burn-duplicates')
@click.option('--base-url', envvar='TICKETS_BASE_URL', default=DEFAULT_BASE_URL, show_default=True)
@click.option(
    '--admin-key',
    envvar='ADMIN_API_KEY',
    default=lambda: _secret_default(settings.admin_api_key),
    help='Bearer key for /admin/* (falls back to ISSUE_API_KEY).',
)
@click.option('--email', 'emails', multiple=True, help='Repeatable, comma separated.')
@click.option(
    '--csv',
    'csv_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Take the emails from a recipient export instead.',
)
@click.option('--keep', 'keep_id', default=None, help='Ticket id to keep when present.')
@click.option('--dry-run', is_flag=True)
@click.pass_context
def burn_duplicates(
    ctx: click.Context,
    base_url: str,
    admin_key: Optional[str],
    emails: Tuple[str, ...],
    csv_path: Optional[Path],
    keep_id: Optional[str],
    dry_run: bool,
) -> None:
    """Burn all but one unused ticket per email (newest kept unless --keep)."""
    if not admin_key:
        raise click.UsageError('Missing admin key (--admin-key, ADMIN_API_KEY or ISSUE_API_KEY)')

    targets = sorted(parse_email_list(emails))
    if csv_path is not None:
        try:
            rows = read_recipient_csv(csv_path)
        except CustomBaseError as e:
            raise click.ClickException(e.message) from e
        targets += [row.email for row in rows if row.email]
    if not targets:
        raise click.UsageError('Missing --email or --csv')

    async def _run() -> int:
        async with TicketsApiClientImpl(
            base_url=base_url,
            api_key=admin_key,
            max_attempts=settings.CAMPAIGN_MAX_ATTEMPTS,
            base_delay=settings.CAMPAIGN_BASE_DELAY_MS / 1000,
            timeout=settings.CAMPAIGN_HTTP_TIMEOUT,
        ) as api_client:
            outcomes = await BurnDuplicatesUseCase(api_client=api_client).run(
                emails=targets, keep_id=keep_id, dry_run=dry_run
            )
        for outcome in outcomes:
            _echo_json(outcome.to_dict())
        return 0 if all(o.ok for o in outcomes) else 1

    ctx.exit(anyio.run(_run))


@cli.command('resend-links')
@click.option('--base-url', envvar='TICKETS_BASE_URL', default=DEFAULT_BASE_URL, show_default=True)
@click.option(
    '--admin-key',
    envvar='ADMIN_API_KEY',
    default=lambda: _secret_default(settings.admin_api_key),
    help='Bearer key for /admin/* (falls back to ISSUE_API_KEY).',
)
@click.option(
    '--in',
    'source_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CAMPAIGN_LEDGER,
    show_default=True,
    help='Campaign ledger whose ok records are resent.',
)
@click.option(
    '--out',
    'resend_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_RESEND_LEDGER,
    show_default=True,
    help='Resend ledger; addresses already resent there are skipped.',
)
@click.option(
    '--delay-ms',
    type=click.IntRange(min=0),
    default=settings.CAMPAIGN_DELAY_MS,
    show_default=True,
)
@click.option('--only', multiple=True, help='Only these emails (repeatable, comma separated).')
@click.option('--skip', multiple=True, help='Emails to leave out (repeatable, comma separated).')
@click.option('--only-unsent', is_flag=True, help='Only tickets whose first email failed.')
@click.option('--link-only/--with-qr', default=True, show_default=True)
@click.option('--dry-run', is_flag=True, help='Plan only; nothing is sent or written.')
@click.pass_context
def resend_links(
    ctx: click.Context,
    base_url: str,
    admin_key: Optional[str],
    source_path: Path,
    resend_path: Path,
    delay_ms: int,
    only: Tuple[str, ...],
    skip: Tuple[str, ...],
    only_unsent: bool,
    link_only: bool,
    dry_run: bool,
) -> None:
    """Mail ticket links again for recipients the campaign ledger lists as issued."""
    if not admin_key:
        raise click.UsageError('Missing admin key (--admin-key, ADMIN_API_KEY or ISSUE_API_KEY)')

    options = ResendOptions(
        only=parse_email_list(only),
        skip=parse_email_list(skip),
        only_unsent=only_unsent,
        link_only=link_only,
        delay=delay_ms / 1000,
        failure_delay=max(0.5, delay_ms / 1000),
    )
    source = JsonlCampaignLedger(source_path)
    if not source.successful_records():
        _echo_json({'ok': False, 'error': f'No ok rows found in {source_path}'})
        ctx.exit(2)

    async def _run() -> int:
        async with TicketsApiClientImpl(
            base_url=base_url,
            api_key=admin_key,
            max_attempts=settings.CAMPAIGN_MAX_ATTEMPTS,
            base_delay=settings.CAMPAIGN_BASE_DELAY_MS / 1000,
            timeout=settings.CAMPAIGN_HTTP_TIMEOUT,
        ) as api_client:
            use_case = ResendLinksUseCase(
                api_client=api_client,
                source=source,
                resend_ledger=JsonlCampaignLedger(resend_path),
                options=options,
            )
            plan = use_case.plan()
            _echo_json(
                {
                    'ok': True,
                    'base_url': base_url,
                    'in': str(source_path),
                    'out': str(resend_path),
                    'dry_run': dry_run,
                    **plan.summary(),
                }
            )
            if dry_run:
                return 0

            report = await use_case.run(plan)
            _echo_json(report.summary())
            return 0 if report.ok else 1

    ctx.exit(anyio.run(_run))


@cli.command('issue-one')
@click.option('--email', required=True)
@click.option('--name', default=None)
@click.option(
    '--type',
    'type_text',
    default=DEFAULT_TYPE_TEXT,
    show_default=True,
    help='Ticket type name, keyword text or id.',
)
@click.option('--base-url', envvar='TICKETS_BASE_URL', default=DEFAULT_BASE_URL, show_default=True)
@click.option(
    '--api-key',
    envvar='ISSUE_API_KEY',
    default=lambda: _secret_default(settings.ISSUE_API_KEY),
    help='Bearer key for /tickets/issue.',
)
@click.option('--link-only/--with-qr', default=True, show_default=True)
@click.pass_context
def issue_one(
    ctx: click.Context,
    email: str,
    name: Optional[str],
    type_text: str,
    base_url: str,
    api_key: Optional[str],
    link_only: bool,
) -> None:
    """Issue one ticket without a CSV or ledger. Exit 1 if the email did not go out."""

    async def _run() -> int:
        async with TicketsApiClientImpl(
            base_url=base_url,
            api_key=api_key,
            max_attempts=settings.CAMPAIGN_MAX_ATTEMPTS,
            base_delay=settings.CAMPAIGN_BASE_DELAY_MS / 1000,
            timeout=settings.CAMPAIGN_HTTP_TIMEOUT,
        ) as api_client:
            result = await IssueOneUseCase(api_client=api_client).issue(
                email=email, name=name, type_text=type_text, link_only=link_only
            )
        if isinstance(result, Err):
            _echo_json({'ok': False, 'error': result.detail, 'status': result.status})
            return 1

        _echo_json({'base_url': base_url, **result.value.to_dict()})
        return 0 if result.value.receipt.email_sent else 1

    ctx.exit(anyio.run(_run))


if __name__ == '__main__':
    cli()
