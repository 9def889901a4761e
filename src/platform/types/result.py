"""
Tagged result type for expected failures.

Operations whose failure is an ordinary outcome (a rejected scanner key, a
recipient the issue API refused) return `Ok(value)` or `Err(kind, detail)`
instead of raising. HTTP controllers turn an `Err` into the matching
`CustomBaseError` with `raise_for_err`.
"""

from enum import StrEnum
from typing import Generic, NoReturn, Optional, TypeAlias, TypeVar

import attrs

from src.platform.exception.exceptions import (
    AuthenticationError,
    ConfigError,
    CustomBaseError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    TransientError,
)


_T = TypeVar('_T')


class ErrorKind(StrEnum):
    AUTH = 'auth'
    FORBIDDEN = 'forbidden'
    VALIDATION = 'validation'
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    TRANSIENT = 'transient'
    CONFIG = 'config'


@attrs.frozen
class Ok(Generic[_T]):
    value: _T

    @property
    def ok(self) -> bool:
        return True


@attrs.frozen
class Err:
    kind: ErrorKind
    detail: str
    status: Optional[int] = None

    @property
    def ok(self) -> bool:
        return False


Result: TypeAlias = Ok[_T] | Err


def to_exception(err: Err) -> CustomBaseError:
    match err.kind:
        case ErrorKind.AUTH:
            return AuthenticationError(err.detail)
        case ErrorKind.FORBIDDEN:
            return ForbiddenError(err.detail)
        case ErrorKind.NOT_FOUND:
            return NotFoundError(err.detail)
        case ErrorKind.TRANSIENT:
            return TransientError(err.detail, status=err.status)
        case ErrorKind.CONFIG:
            return ConfigError(err.detail)
        case ErrorKind.CONFLICT:
            return DomainError(err.detail, status_code=409)
        case _:
            return DomainError(err.detail)


def raise_for_err(err: Err) -> NoReturn:
    raise to_exception(err)
