"""
HTTP client for the tickets service, used by campaign tooling.

Transient failures (HTTP 429, any 5xx, connection/timeout errors) are
retried with exponential backoff: attempt n waits base_delay * 2^(n-1)
before the next try. Every other failure returns an `Err` right away.
"""

from typing import Any, Awaitable, Callable, List, Optional

import anyio
import httpx
import orjson
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.platform.exception.exceptions import TransientError
from src.platform.logging.loguru_io import Logger
from src.platform.types.result import Err, ErrorKind, Ok, Result
from src.service.campaign.app.interface.i_tickets_api_client import ITicketsApiClient
from src.service.campaign.domain.value_object.remote_ticket import (
    IssueReceipt,
    RemoteTicket,
    TicketTypeOption,
)


_KIND_BY_STATUS = {
    401: ErrorKind.AUTH,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
}


def _decode(response: httpx.Response) -> dict[str, Any]:
    try:
        body = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_text(body: dict[str, Any], status: int) -> str:
    error = body.get('error')
    if error:
        return str(error)
    return f'HTTP {status}' if body else f'HTTP {status} (no JSON body)'


def _receipt(body: dict[str, Any]) -> IssueReceipt:
    email_result = body.get('email')
    return IssueReceipt(
        ticket_id=str(body.get('ticketId') or ''),
        ticket_url=str(body.get('ticketUrl') or ''),
        email_result=email_result if isinstance(email_result, dict) else {},
    )


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    Logger.base.warning(
        f'🔁 [TicketsAPI] Attempt {retry_state.attempt_number} failed ({error}), '
        f'retrying in {wait:.2f}s'
    )


class TicketsApiClientImpl(ITicketsApiClient):
    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        max_attempts: int = 6,
        base_delay: float = 0.8,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
    ) -> None:
        headers = {'Accept': 'application/json'}
        if api_key:
            headers['Authorization'] = f'Bearer {api_key}'
        self.base_url = base_url.rstrip('/')
        self.max_attempts = max(1, max_attempts)
        self.base_delay = max(0.0, base_delay)
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            base_url=self.base_url, headers=headers, timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> 'TicketsApiClientImpl':
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_types(self) -> Result[List[TicketTypeOption]]:
        result = await self._request('GET', '/tickets/types')
        if isinstance(result, Err):
            return result
        types = result.value.get('types') or []
        return Ok(
            [
                TicketTypeOption(id=str(t['id']), name=str(t['name']))
                for t in types
                if isinstance(t, dict) and t.get('id') and t.get('name')
            ]
        )

    async def issue(
        self,
        *,
        ticket_type_id: str,
        email: str,
        name: Optional[str] = None,
        link_only: bool = True,
    ) -> Result[IssueReceipt]:
        payload: dict[str, Any] = {
            'ticketTypeId': ticket_type_id,
            'email': email,
            'linkOnly': link_only,
        }
        if name:
            payload['name'] = name

        result = await self._request('POST', '/tickets/issue', payload=payload)
        if isinstance(result, Err):
            return result
        return Ok(_receipt(result.value))

    async def resend(self, *, ticket_id: str, link_only: bool = True) -> Result[IssueReceipt]:
        result = await self._request(
            'POST', '/admin/tickets/resend', payload={'ticketId': ticket_id, 'linkOnly': link_only}
        )
        if isinstance(result, Err):
            return result
        return Ok(_receipt(result.value))

    async def list_by_email(self, *, email: str, limit: int = 200) -> Result[List[RemoteTicket]]:
        result = await self._request(
            'POST', '/admin/tickets/by-email', payload={'email': email, 'limit': limit}
        )
        if isinstance(result, Err):
            return result
        tickets = result.value.get('tickets') or []
        return Ok(
            [
                RemoteTicket(
                    id=str(t['id']), used=bool(t.get('used')), issued_at=t.get('issuedAt')
                )
                for t in tickets
                if isinstance(t, dict) and t.get('id')
            ]
        )

    async def burn(self, *, ticket_ids: List[str]) -> Result[int]:
        result = await self._request(
            'POST', '/admin/tickets/burn', payload={'ticketIds': ticket_ids}
        )
        if isinstance(result, Err):
            return result
        return Ok(int(result.value.get('burned') or 0))

    async def _request(
        self, method: str, path: str, *, payload: Optional[dict[str, Any]] = None
    ) -> Result[dict[str, Any]]:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.base_delay),
            retry=retry_if_exception_type(TransientError),
            before_sleep=_log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    result = await self._send_once(method, path, payload=payload)
        except TransientError as e:
            return Err(ErrorKind.TRANSIENT, e.message, status=e.status)
        return result

    async def _send_once(
        self, method: str, path: str, *, payload: Optional[dict[str, Any]]
    ) -> Result[dict[str, Any]]:
        content = orjson.dumps(payload) if payload is not None else None
        headers = {'Content-Type': 'application/json'} if content is not None else None
        try:
            response = await self._client.request(method, path, content=content, headers=headers)
        except httpx.TransportError as e:
            raise TransientError(f'{type(e).__name__}: {e}') from e

        status = response.status_code
        body = _decode(response)
        if status == 429 or status >= 500:
            raise TransientError(_error_text(body, status), status=status)
        if response.is_error:
            return Err(
                _KIND_BY_STATUS.get(status, ErrorKind.VALIDATION),
                _error_text(body, status),
                status=status,
            )
        if body.get('ok') is not True:
            return Err(ErrorKind.VALIDATION, _error_text(body, status), status=status)
        return Ok(body)
