"""
Capstone Hub - Logging

One "capstonehub" logger for the whole service. Records carry the request id,
user id and role of the request being served; production writes JSON lines,
development writes a compact coloured line.
"""

import logging
import sys
import json
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List
from contextvars import ContextVar

from app.core.config import settings


request_id_var: ContextVar[str] = ContextVar('request_id', default='')
user_id_var: ContextVar[str] = ContextVar('user_id', default='')
role_var: ContextVar[str] = ContextVar('role', default='')

# Attributes every LogRecord has; anything else on a record came in through `extra`
_RECORD_ATTRIBUTES = set(logging.LogRecord('', 0, '', 0, '', None, None).__dict__) | {'message', 'asctime'}

_LEVEL_COLOURS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_RESET = '\033[0m'


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


def set_role(role: str) -> None:
    role_var.set(role)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


def _context() -> Dict[str, str]:
    """Request context of the current task, empty values left out"""
    context = {
        'request_id': request_id_var.get(),
        'user_id': user_id_var.get(),
        'role': role_var.get(),
    }
    return {key: value for key, value in context.items() if value}


class JSONFormatter(logging.Formatter):
    """One JSON object per line: message, location, request context and `extra` fields"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f'{record.module}.{record.funcName}:{record.lineno}',
            **_context(),
        }
        entry.update({
            key: value for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith('_')
        })
        if record.exc_info and record.exc_info[0]:
            entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info),
            }
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """`LEVEL [request user:role] message`, level coloured when writing to a terminal"""

    def __init__(self, fmt: str, colour: bool = False):
        super().__init__(fmt)
        self.colour = colour

    def format(self, record: logging.LogRecord) -> str:
        context = _context()
        record.request_id = context.get('request_id', '-')
        record.user_id = context.get('user_id', '-')
        record.role = context.get('role', '-')
        line = super().format(record)
        if self.colour and record.levelname in _LEVEL_COLOURS:
            line = f'{_LEVEL_COLOURS[record.levelname]}{line}{_RESET}'
        return line


class CapstoneHubLogger(logging.Logger):
    """Logger with one helper per kind of event the service reports"""

    def log_request(self, method: str, path: str, status_code: int, duration_ms: float, **kwargs) -> None:
        """Completed HTTP request; 4xx warn and 5xx error"""
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        self.log(
            level,
            f'{method} {path} - {status_code} ({duration_ms:.2f}ms)',
            extra={
                'event_type': 'http_request',
                'http_method': method,
                'http_path': path,
                'http_status': status_code,
                'duration_ms': round(duration_ms, 2),
                **kwargs,
            },
        )

    def log_batch_result(self, operation: str, total: int, failed: int, **kwargs) -> None:
        """Outcome of a best-effort batch; any failed row makes it a warning"""
        self.log(
            logging.WARNING if failed else logging.INFO,
            f'Batch {operation}: {total - failed}/{total} succeeded',
            extra={'event_type': 'batch', 'batch_operation': operation, 'batch_total': total,
                   'batch_failed': failed, **kwargs},
        )

    def log_notification(self, recipient: str, subject: str, success: bool, reason: str = None) -> None:
        outcome = 'sent' if success else f'not sent ({reason})' if reason else 'not sent'
        self.log(
            logging.INFO if success else logging.WARNING,
            f"Email '{subject}' to {recipient}: {outcome}",
            extra={'event_type': 'notification', 'recipient': recipient, 'notification_success': success},
        )

    def log_auth_event(self, event: str, success: bool, user_email: str = None, reason: str = None,
                       **kwargs) -> None:
        parts = [f"Auth {event}: {'success' if success else 'failed'}"]
        if user_email:
            parts.append(user_email)
        if reason:
            parts.append(reason)
        self.log(
            logging.INFO if success else logging.WARNING,
            ' - '.join(parts),
            extra={'event_type': 'auth', 'auth_event': event, 'auth_success': success, **kwargs},
        )

    def log_error_with_context(self, error: Exception, context: str = None, **kwargs) -> None:
        self.error(
            f'Error in {context}: {type(error).__name__}: {error}',
            exc_info=error,
            extra={'event_type': 'error', 'error_type': type(error).__name__, 'error_context': context,
                   **kwargs},
        )

    def log_performance(self, operation: str, duration_ms: float, threshold_ms: float = 1000, **kwargs) -> None:
        """Debug-level timing that turns into a warning past `threshold_ms`"""
        slow = duration_ms > threshold_ms
        self.log(
            logging.WARNING if slow else logging.DEBUG,
            f'Slow: {operation} took {duration_ms:.2f}ms (threshold {threshold_ms}ms)' if slow
            else f'{operation} took {duration_ms:.2f}ms',
            extra={'event_type': 'performance', 'operation': operation, 'duration_ms': round(duration_ms, 2),
                   **kwargs},
        )


def _handlers(console: logging.Formatter, file: logging.Formatter) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(console)
    handlers.append(console_handler)

    if settings.LOG_FILE:
        log_file = Path(settings.LOG_FILE)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file)
        handlers.append(file_handler)

    return handlers


def setup_logging() -> CapstoneHubLogger:
    logging.setLoggerClass(CapstoneHubLogger)
    logger = logging.getLogger('capstonehub')
    logger.__class__ = CapstoneHubLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()

    json_logging = settings.ENVIRONMENT == 'production'
    if json_logging:
        formatter = JSONFormatter()
        handlers = _handlers(formatter, formatter)
    else:
        handlers = _handlers(
            ConsoleFormatter('%(levelname)-8s | %(message)s', colour=sys.stdout.isatty()),
            ConsoleFormatter(
                '%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s:%(role)s] | '
                '%(funcName)s:%(lineno)d | %(message)s'
            ),
        )
    for handler in handlers:
        logger.addHandler(handler)

    for noisy in ('httpx', 'httpcore', 'uvicorn.access', 'sqlalchemy.engine'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug(f'Logging ready (environment={settings.ENVIRONMENT}, json={json_logging})')
    return logger


logger: CapstoneHubLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'set_request_id',
    'set_user_id',
    'set_role',
    'generate_request_id',
    'CapstoneHubLogger',
]
