from email.message import EmailMessage
from email.utils import make_msgid, parseaddr
from html import escape
import re
import smtplib
import ssl
from typing import Optional
from urllib.parse import urlsplit

from anyio import to_thread
import attrs

from src.platform.config.core_setting import Settings
from src.platform.logging.loguru_io import Logger
from src.service.admission.app.interface.i_ticket_mailer import ITicketMailer
from src.service.admission.domain.entity.ticket_entity import Ticket
from src.service.admission.domain.entity.ticket_type_entity import TicketType
from src.service.admission.domain.value_object.email_delivery import EmailDeliveryResult


_HOST_PORT_PATTERN = re.compile(r'^([^:]+)(?::(\d+))?$')


@attrs.define(frozen=True)
class SmtpEndpoint:
    host: str
    port: int
    secure: bool  # implicit TLS (smtps / 465); otherwise STARTTLS


def parse_email_server(value: Optional[str], default_port: int = 587) -> Optional[SmtpEndpoint]:
    """Accepts `host`, `host:port`, `smtp://host[:port]` or `smtps://host[:port]`."""
    raw = (value or '').strip()
    if not raw:
        return None

    if re.match(r'^smtps?://', raw, re.IGNORECASE):
        parts = urlsplit(raw)
        try:
            explicit_port = parts.port
        except ValueError:
            return None
        implicit_tls = parts.scheme.lower() == 'smtps'
        port = explicit_port or (465 if implicit_tls else default_port)
        if not parts.hostname:
            return None
        return SmtpEndpoint(host=parts.hostname, port=port, secure=implicit_tls or port == 465)

    match = _HOST_PORT_PATTERN.match(raw)
    if not match:
        return None
    port = int(match.group(2)) if match.group(2) else default_port
    return SmtpEndpoint(host=match.group(1).strip(), port=port, secure=port == 465)


class SmtpTicketMailer(ITicketMailer):
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.endpoint = parse_email_server(settings.EMAIL_SERVER, settings.EMAIL_PORT)

    def _missing_config(self) -> Optional[str]:
        if self.endpoint is None:
            return 'EMAIL_SERVER missing/invalid'
        if not self.settings.EMAIL_SENDER:
            return 'Missing sender: set EMAIL_SENDER'
        if bool(self.settings.EMAIL_USERNAME) != bool(self.settings.EMAIL_PASSWORD):
            return 'EMAIL_USERNAME/EMAIL_PASSWORD must be set together'
        return None

    @Logger.io
    async def send_ticket(
        self,
        *,
        ticket: Ticket,
        ticket_type: TicketType,
        ticket_url: str,
        qr_png: Optional[bytes] = None,
    ) -> EmailDeliveryResult:
        if problem := self._missing_config():
            Logger.base.warning(f'📭 [Mail] Not sending to {ticket.email}: {problem}')
            return EmailDeliveryResult.not_configured(problem)

        message = self.build_message(
            ticket=ticket, ticket_type=ticket_type, ticket_url=ticket_url, qr_png=qr_png
        )
        try:
            await to_thread.run_sync(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            Logger.base.error(f'📭 [Mail] Delivery to {ticket.email} failed: {e}')
            return EmailDeliveryResult.failed(str(e) or type(e).__name__)

        Logger.base.info(f'📨 [Mail] Ticket {ticket.id} sent to {ticket.email}')
        return EmailDeliveryResult.sent(message['Message-ID'])

    def build_message(
        self,
        *,
        ticket: Ticket,
        ticket_type: TicketType,
        ticket_url: str,
        qr_png: Optional[bytes] = None,
    ) -> EmailMessage:
        sender = self.settings.EMAIL_SENDER or ''
        greeting = f'Hæ {ticket.name}' if ticket.name else 'Hæ'
        event_name = ticket_type.event_name or ''

        message = EmailMessage()
        message['Subject'] = self.settings.EMAIL_SUBJECT
        message['From'] = sender
        message['To'] = ticket.email
        sender_domain = parseaddr(sender)[1].rpartition('@')[2]
        message['Message-ID'] = make_msgid(domain=sender_domain or None)
        if self.settings.EMAIL_REPLY_TO:
            message['Reply-To'] = self.settings.EMAIL_REPLY_TO

        message.set_content(
            '\n'.join(
                (
                    f'{greeting},',
                    '',
                    f'Hér er miðinn þinn á {event_name} ({ticket_type.name}).',
                    f'Opnaðu hann hér: {ticket_url}',
                    '',
                    'Sýndu QR kóðann við innganginn. Hver miði gildir einu sinni.',
                )
            )
        )

        qr_cid = make_msgid()
        qr_html = (
            f'<p><img src="cid:{qr_cid[1:-1]}" alt="QR" width="240" height="240"></p>'
            if qr_png
            else ''
        )
        message.add_alternative(
            f'<p>{escape(greeting)},</p>'
            f'<p>Hér er miðinn þinn á <strong>{escape(event_name)}</strong> '
            f'({escape(ticket_type.name)}).</p>'
            f'<p><a href="{escape(ticket_url)}">Opna miðann</a></p>'
            f'{qr_html}'
            '<p>Sýndu QR kóðann við innganginn. Hver miði gildir einu sinni.</p>',
            subtype='html',
        )
        if qr_png:
            html_part = message.get_payload()[-1]
            html_part.add_related(qr_png, 'image', 'png', cid=qr_cid, filename='ticket.png')

        return message

    def _deliver(self, message: EmailMessage) -> None:
        endpoint = self.endpoint
        assert endpoint is not None
        timeout = self.settings.EMAIL_TIMEOUT
        context = ssl.create_default_context()

        smtp: smtplib.SMTP
        if endpoint.secure:
            smtp = smtplib.SMTP_SSL(endpoint.host, endpoint.port, timeout=timeout, context=context)
        else:
            smtp = smtplib.SMTP(endpoint.host, endpoint.port, timeout=timeout)

        with smtp:
            if not endpoint.secure:
                smtp.starttls(context=context)
            if self.settings.EMAIL_USERNAME and self.settings.EMAIL_PASSWORD:
                smtp.login(
                    self.settings.EMAIL_USERNAME,
                    self.settings.EMAIL_PASSWORD.get_secret_value(),
                )
            smtp.send_message(message)
