import hmac
import re
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Header
from pydantic import SecretStr

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import AuthenticationError, ConfigError


_BEARER_PATTERN = re.compile(r'^Bearer\s+(.+)$', re.IGNORECASE)


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    match = _BEARER_PATTERN.match((authorization or '').strip())
    return match.group(1).strip() if match else None


def secrets_match(presented: str, expected: SecretStr) -> bool:
    return hmac.compare_digest(
        presented.encode('utf-8'), expected.get_secret_value().encode('utf-8')
    )


async def require_scanner_bearer(authorization: Optional[str] = Header(default=None)) -> str:
    """The raw scanner secret; whether it is a live key is decided by the use case."""
    secret = parse_bearer(authorization)
    if not secret:
        raise AuthenticationError('Missing Authorization: Bearer <scanner key>')
    return secret


@inject
async def require_issue_key(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(Provide[Container.config_service]),
) -> None:
    """Enforced only when ISSUE_API_KEY is configured."""
    expected = settings.ISSUE_API_KEY
    if expected is None:
        return
    presented = parse_bearer(authorization)
    if not presented or not secrets_match(presented, expected):
        raise AuthenticationError('Unauthorized')


@inject
async def require_admin_key(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(Provide[Container.config_service]),
) -> None:
    expected = settings.admin_api_key
    if expected is None:
        raise ConfigError('Admin auth not configured')
    presented = parse_bearer(authorization)
    if not presented or not secrets_match(presented, expected):
        raise AuthenticationError('Unauthorized')
