from contextvars import ContextVar
from enum import StrEnum
import logging
import re
import sys

from loguru import logger as loguru_logger

from src.platform.config.core_setting import settings
from src.platform.constant.path import LOG_DIR
from src.platform.logging.service_context import get_service_context


# Argument names and repr keys whose values never reach a log line
SENSITIVE_KEYWORDS = {
    'password',
    'api_key',
    'admin_key',
    'authorization',
    'bearer',
    'key_hash',
    'secret',
}

MAX_LOG_CONTENT_LENGTH = 1000

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


# granian: 127.0.0.1 - "POST /tickets/validate HTTP/1.1" - 200 - 8ms
_ACCESS_LOG_STATUS = re.compile(r' HTTP/[\d.]+" - (\d{3}) - ')


def access_log_level(message: str) -> str | None:
    """Level for a granian access line by its status code; None for other messages."""
    match = _ACCESS_LOG_STATUS.search(message)
    if match is None:
        return None
    status_code = int(match.group(1))
    if status_code >= 500:
        return 'CRITICAL'
    if status_code >= 400:
        return 'ERROR'
    if status_code >= 300:
        return 'WARNING'
    return 'SUCCESS'


io_log_format = ' | '.join(
    (
        f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
        '<lvl>{level:<8}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
        '{message}',
        '<lk>{elapsed}</>',
        f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>',
    )
)


loguru_logger.remove()
custom_logger = loguru_logger.bind(
    **{
        ExtraField.SERVICE_CONTEXT: get_service_context(),
        ExtraField.CHAIN_START_TIME: '',
        ExtraField.CALL_TARGET: '',
    }
)


class InterceptHandler(logging.Handler):
    """Route stdlib logging (granian, sqlalchemy, httpx) into the loguru sinks."""

    def emit(self, record: logging.LogRecord) -> None:
        message = record.getMessage()
        level = access_log_level(message)
        if level is None:
            try:
                level = loguru_logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        custom_logger.opt(depth=depth, exception=record.exc_info).log(level, message)


min_log_level = 'DEBUG' if settings.DEBUG else 'INFO'

# stderr keeps stdout clean for CLI output (dry-run plans, reports)
custom_logger.add(sys.stderr, format=io_log_format, level=min_log_level, enqueue=True)

if settings.DEBUG:
    custom_logger.add(
        LOG_DIR / '{time:YYYY-MM-DD_HH}.log',
        format=io_log_format,
        rotation='1 hour',
        retention='7 days',
        compression='gz',
        enqueue=True,
        level=min_log_level,
    )

logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
