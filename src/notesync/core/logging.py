"""
Logging configuration for the NoteSync backend.
"""
import json
import logging
import logging.config
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import Settings, get_settings

# LogRecord attributes that are not user supplied `extra` fields
_RESERVED_ATTRS = frozenset((
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName',
    'created', 'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'taskName', 'message', 'asctime',
))


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info),
            }

        extra = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        }
        if extra:
            log_entry['extra'] = extra

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record: logging.LogRecord) -> str:
        # work on a copy so file handlers sharing the record stay uncolored
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{self.BOLD}{record.levelname}{self.RESET}"
        record.name = f"\033[90m{record.name}{self.RESET}"
        return super().format(record)


def get_log_level(level_str: Optional[str] = None) -> int:
    """Get log level from string or settings."""
    level_str = level_str or get_settings().log_level
    level = logging.getLevelName(level_str.upper())
    return level if isinstance(level, int) else logging.INFO


CONSOLE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-30s | %(funcName)-20s:%(lineno)-4d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
MAX_LOG_BYTES = 10_000_000
LOG_BACKUPS = 5


def _rotating(path: Path, formatter: str, level: str) -> Dict[str, Any]:
    return {
        'class': 'logging.handlers.RotatingFileHandler',
        'filename': str(path),
        'maxBytes': MAX_LOG_BYTES,
        'backupCount': LOG_BACKUPS,
        'formatter': formatter,
        'level': level,
    }


def _quiet(level: str, *handlers: str) -> Dict[str, Any]:
    return {'handlers': list(handlers), 'level': level, 'propagate': False}


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    """dictConfig schema for the app.

    Everything under ``notesync`` goes to the console, notesync.log and
    error.log. Server and driver loggers are capped so the auto-save and
    realtime traffic stays readable.
    """
    log_dir = Path(settings.log_dir)
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'json': {'()': JSONFormatter},
            'colored': {'()': ColoredFormatter, 'format': CONSOLE_FORMAT, 'datefmt': DATE_FORMAT},
            'file': {'format': FILE_FORMAT, 'datefmt': DATE_FORMAT},
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'stream': sys.stdout,
                # colored for people, JSON for log shippers
                'formatter': 'colored' if settings.debug else 'json',
                'level': get_log_level(settings.log_level),
            },
            'file': _rotating(log_dir / 'notesync.log', 'file', 'DEBUG'),
            'error_file': _rotating(log_dir / 'error.log', 'json', 'ERROR'),
        },
        'root': {'handlers': ['console', 'file'], 'level': 'INFO'},
        'loggers': {
            'notesync': _quiet('DEBUG', 'console', 'file', 'error_file'),
            'uvicorn': _quiet('INFO', 'console'),
            'uvicorn.access': _quiet('WARNING', 'console'),
            'websockets': _quiet('WARNING', 'console'),
            'sqlalchemy': _quiet('WARNING', 'file'),
            'aiosqlite': _quiet('WARNING', 'file'),
        },
    }


def setup_logging() -> None:
    """Create the log directory and apply the logging config."""
    settings = get_settings()
    Path(settings.log_dir).mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(settings))

    get_logger('logging').info("Logging system initialized", extra={
        'log_level': settings.log_level,
        'debug': settings.debug,
        'environment': settings.environment,
    })


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the notesync namespace."""
    return logging.getLogger(f"notesync.{name}")


class LoggingMiddleware:
    """ASGI middleware logging HTTP requests and WebSocket sessions."""

    def __init__(self, app, logger_name: str = "http"):
        self.app = app
        self.logger = get_logger(logger_name)

    async def __call__(self, scope, receive, send):
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        request_id = id(scope)
        client = scope.get('client')
        base = {
            'request_id': request_id,
            'path': scope['path'],
            'client_ip': client[0] if client else 'unknown',
        }

        if scope["type"] == "websocket":
            self.logger.info("WebSocket session opened", extra=base)
            try:
                await self.app(scope, receive, send)
            finally:
                self.logger.info("WebSocket session closed", extra={
                    **base,
                    'duration_ms': round((time.perf_counter() - start) * 1000, 2),
                })
            return

        self.logger.info("HTTP Request", extra={**base, 'method': scope['method']})

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                self.logger.info("HTTP Response", extra={
                    **base,
                    'method': scope['method'],
                    'status_code': message.get('status', 0),
                    'duration_ms': round((time.perf_counter() - start) * 1000, 2),
                })
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            self.logger.error("HTTP Request Failed", extra={
                **base,
                'method': scope['method'],
                'duration_ms': round((time.perf_counter() - start) * 1000, 2),
                'exception_type': type(exc).__name__,
                'exception_message': str(exc),
            })
            raise
