"""
Loguru sinks for the booking service.

One stdout sink in every environment; an hourly rotated file sink under LOG_DIR when
DEBUG is on. Standard-library loggers (granian, asyncpg, httpx, sqlalchemy) are routed
through the same format so a request's lines stay together.
"""

from contextvars import ContextVar
from datetime import datetime
from enum import StrEnum
import logging
import os
import sys
from typing import TYPE_CHECKING
import zoneinfo

from loguru import logger as loguru_logger


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.logging.service_context import get_service_context


# Keys whose values never reach the log: credentials plus passenger contact data
SENSITIVE_KEYWORDS = {
    'password',
    'secret',
    'token',
    'authorization',
    'cookie',
    'phone',
    'contact_phone',
    'email',
    'contact_email',
}
MAX_CONTENT_LENGTH = 1000

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth', default=0)

# Library loggers that only produce wire noise below INFO
_QUIET_BELOW_INFO = ('httpcore', 'hpack', 'asyncio', 'aiosqlite')


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


def _default_extra() -> dict[str, str]:
    return {
        ExtraField.SERVICE_CONTEXT: get_service_context(),
        ExtraField.CHAIN_START_TIME: '',
        ExtraField.CALL_TARGET: '',
    }


def access_log_level(message: str) -> str | None:
    """
    Level for an HTTP access line, from its status code.

    '127.0.0.1 - "POST /api/order HTTP/1.1" 409 0.012' -> 'ERROR'
    Returns None when the message is not an access line.
    """
    if ' HTTP/' not in message or message.count('"') < 2:
        return None
    tail = message.rsplit('"', 1)[1].split()
    if not tail or not tail[0].isdigit():
        return None

    status_code = int(tail[0])
    if status_code >= 500:
        return 'CRITICAL'
    if status_code >= 400:
        return 'ERROR'
    if status_code >= 300:
        return 'WARNING'
    if status_code >= 200:
        return 'SUCCESS'
    return 'INFO'


class InterceptHandler(logging.Handler):
    def __init__(self, bound_logger: 'LoguruLogger') -> None:
        super().__init__()
        self._bound_logger = bound_logger

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno < logging.INFO and record.name.startswith(_QUIET_BELOW_INFO):
            return

        message = record.getMessage()
        level: str | int | None = access_log_level(message)
        if level is None:
            try:
                level = loguru_logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

        # Walk out of the logging module so file/line point at the caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        self._bound_logger.opt(depth=depth, exception=record.exc_info).log(level, message)


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


def _log_file_path() -> str:
    test_log_dir = os.environ.get('TEST_LOG_DIR')
    log_dir = test_log_dir or settings.LOG_DIR
    stamp = datetime.now(zoneinfo.ZoneInfo(settings.TIMEZONE)).strftime('%Y-%m-%d_%H')
    prefix = 'test_' if test_log_dir else ''
    return f'{log_dir}/{prefix}{stamp}.log'


def configure_logger() -> 'LoguruLogger':
    loguru_logger.remove()
    bound = loguru_logger.bind(**_default_extra())
    level = 'DEBUG' if settings.DEBUG else 'INFO'

    bound.add(sys.stdout, format=io_log_format, level=level, enqueue=True)
    if settings.DEBUG:
        bound.add(
            _log_file_path(),
            format=io_log_format,
            rotation='1 hour',
            retention='7 days',
            compression='gz',
            enqueue=True,
            level=level,
        )

    logging.basicConfig(handlers=[InterceptHandler(bound)], level=0, force=True)
    return bound


custom_logger = configure_logger()
