from pydantic import SecretStr
import pytest

from src.platform.exception.exceptions import (
    AuthenticationError,
    ConfigError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    TransientError,
)
from src.platform.logging.loguru_io_config import access_log_level
from src.platform.logging.loguru_io_utils import MASK, mask_sensitive, should_mask_keyword
from src.platform.types.result import Err, ErrorKind, Ok, raise_for_err, to_exception


@pytest.mark.unit
class TestResult:
    def test_ok_and_err_flags(self) -> None:
        assert Ok(1).ok is True
        assert Err(ErrorKind.VALIDATION, 'bad').ok is False

    @pytest.mark.parametrize(
        'kind,exc_type,status_code',
        [
            (ErrorKind.AUTH, AuthenticationError, 401),
            (ErrorKind.FORBIDDEN, ForbiddenError, 403),
            (ErrorKind.NOT_FOUND, NotFoundError, 404),
            (ErrorKind.VALIDATION, DomainError, 400),
            (ErrorKind.CONFLICT, DomainError, 409),
            (ErrorKind.TRANSIENT, TransientError, 503),
            (ErrorKind.CONFIG, ConfigError, 500),
        ],
    )
    def test_to_exception(self, kind: ErrorKind, exc_type: type, status_code: int) -> None:
        exc = to_exception(Err(kind, 'detail', status=502))

        assert isinstance(exc, exc_type)
        assert exc.status_code == status_code
        assert exc.message == 'detail'

    def test_transient_keeps_upstream_status(self) -> None:
        exc = to_exception(Err(ErrorKind.TRANSIENT, 'HTTP 502', status=502))

        assert isinstance(exc, TransientError)
        assert exc.status == 502

    def test_raise_for_err(self) -> None:
        with pytest.raises(ForbiddenError, match='Invalid scanner key'):
            raise_for_err(Err(ErrorKind.FORBIDDEN, 'Invalid scanner key'))


@pytest.mark.unit
class TestMasking:
    @pytest.mark.parametrize(
        'raw,expected',
        [
            ('password=hunter2', f'password={MASK}'),
            ("api_key='abc123'", f"api_key='{MASK}'"),
            ('Bearer door-a-secret', f'Bearer {MASK}'),
            ('email=jon@hi.is', 'email=jon@hi.is'),
        ],
    )
    def test_mask_sensitive_strings(self, raw: str, expected: str) -> None:
        assert mask_sensitive(raw) == expected

    def test_secret_str_is_masked(self) -> None:
        assert mask_sensitive(SecretStr('x')) == MASK

    def test_sensitive_keyword_values(self) -> None:
        assert should_mask_keyword('Authorization', 'Bearer x') == MASK
        assert should_mask_keyword('bearer', 'door-a-secret') == MASK
        assert should_mask_keyword('email', 'jon@hi.is') == 'jon@hi.is'


@pytest.mark.unit
class TestAccessLogLevel:
    @pytest.mark.parametrize(
        'status,level',
        [(200, 'SUCCESS'), (302, 'WARNING'), (401, 'ERROR'), (503, 'CRITICAL')],
    )
    def test_level_follows_status(self, status: int, level: str) -> None:
        message = f'127.0.0.1 - "POST /tickets/validate HTTP/1.1" - {status} - 8ms'

        assert access_log_level(message) == level

    def test_other_messages_keep_their_level(self) -> None:
        assert access_log_level('Ticket issued - 200 - done') is None
