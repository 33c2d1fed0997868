"""
Structured JSON logging for the dashdeck console.

Every record is emitted as one JSON object carrying the request and
extension correlation IDs from the current context.
"""

import json
import uuid
import logging
import time
from datetime import datetime, timezone
from typing import Optional, Dict
from contextvars import ContextVar

# Context variables for request tracing
REQUEST_ID: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
EXTENSION_ID: ContextVar[Optional[str]] = ContextVar('extension_id', default=None)


class StructuredLogger:
    """Structured JSON logger with correlation IDs."""

    def __init__(self, name: str, level: int = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Remove any existing handlers to avoid duplicates
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        handler = logging.StreamHandler()
        handler.setFormatter(self.JSONFormatter())
        self.logger.addHandler(handler)

        self.logger.propagate = False

    class JSONFormatter(logging.Formatter):
        """JSON formatter with correlation IDs and structured fields."""

        def format(self, record):
            log_entry = {
                'timestamp': datetime.now(timezone.utc).isoformat(),
                'level': record.levelname,
                'logger': record.name,
                'message': record.getMessage(),
                'module': record.module,
                'function': record.funcName,
                'line': record.lineno,
            }

            if REQUEST_ID.get():
                log_entry['request_id'] = REQUEST_ID.get()
            if EXTENSION_ID.get():
                log_entry['extension_id'] = EXTENSION_ID.get()

            if hasattr(record, 'extra_fields'):
                log_entry.update(record.extra_fields)

            if hasattr(record, 'latency_ms'):
                log_entry['latency_ms'] = record.latency_ms

            if record.exc_info:
                log_entry['exception'] = self.formatException(record.exc_info)
                log_entry['exception_type'] = record.exc_info[0].__name__ if record.exc_info[0] else None

            return json.dumps(log_entry, default=str)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    def _log_with_extras(self, level: int, message: str, **extra_fields):
        self.logger.log(level, message, extra={'extra_fields': extra_fields})

    def debug(self, message: str, **extra_fields):
        self._log_with_extras(logging.DEBUG, message, **extra_fields)

    def info(self, message: str, **extra_fields):
        self._log_with_extras(logging.INFO, message, **extra_fields)

    def warning(self, message: str, **extra_fields):
        self._log_with_extras(logging.WARNING, message, **extra_fields)

    def error(self, message: str, **extra_fields):
        self._log_with_extras(logging.ERROR, message, **extra_fields)

    def exception(self, message: str, **extra_fields):
        """Log exception with traceback and extra fields."""
        self.logger.exception(message, extra={'extra_fields': extra_fields})

    # Console events

    def view_registered(self, view_id: str, kind: str, title: str, sections: list):
        self.info(
            "View registered",
            view_id=view_id,
            kind=kind,
            title=title,
            sections=sections,
            event_type="view_registered"
        )

    def view_unregistered(self, view_id: str):
        self.info("View unregistered", view_id=view_id, event_type="view_unregistered")

    def extension_loaded(self, extension_id: str, grants: list, duration_ms: float):
        self.info(
            "Extension loaded",
            extension_id=extension_id,
            grants=grants,
            latency_ms=duration_ms,
            event_type="extension_loaded"
        )

    def extension_failed(self, extension_id: str, error: Exception):
        self.exception(
            "Extension failed to load",
            extension_id=extension_id,
            exception_type=error.__class__.__name__,
            error=str(error),
            event_type="extension_failed"
        )

    def api_request(self, method: str, path: str, status_code: int, duration_ms: float):
        level = logging.INFO if status_code < 400 else logging.WARNING
        self._log_with_extras(
            level,
            f"{method} {path} {status_code}",
            method=method,
            path=path,
            status_code=status_code,
            latency_ms=duration_ms,
            event_type="api_request"
        )


def set_request_context(request_id: str = None, extension_id: str = None):
    """Set correlation IDs for the current context."""
    if request_id:
        REQUEST_ID.set(request_id)
    if extension_id:
        EXTENSION_ID.set(extension_id)


def clear_request_context():
    REQUEST_ID.set(None)
    EXTENSION_ID.set(None)


def get_request_context() -> Dict[str, Optional[str]]:
    return {
        'request_id': REQUEST_ID.get(),
        'extension_id': EXTENSION_ID.get(),
    }


def generate_request_id() -> str:
    return f"req-{uuid.uuid4().hex[:12]}"


def track_http_requests(app, mount_root: str = "/ext"):
    """Middleware to track HTTP requests with structured logging.

    Requests under ``mount_root`` carry the extension id in the log context.
    """
    prefix = mount_root.rstrip("/") + "/"

    @app.middleware("http")
    async def request_logging_middleware(request, call_next):
        set_request_context(request_id=generate_request_id())

        path = request.url.path
        if path.startswith(prefix):
            extension_id = path[len(prefix):].split("/", 1)[0]
            if extension_id:
                set_request_context(extension_id=extension_id)

        start_time = time.time()
        try:
            response = await call_next(request)
            api_logger.api_request(
                method=request.method,
                path=path,
                status_code=response.status_code,
                duration_ms=(time.time() - start_time) * 1000
            )
            return response
        except Exception as e:
            api_logger.error(
                "HTTP request failed",
                method=request.method,
                path=path,
                latency_ms=(time.time() - start_time) * 1000,
                exception_type=e.__class__.__name__,
                error=str(e)
            )
            raise
        finally:
            clear_request_context()


# Pre-configured loggers for different components
api_logger = StructuredLogger("dashdeck.api")
loader_logger = StructuredLogger("dashdeck.loader")
registry_logger = StructuredLogger("dashdeck.registry")

ALL_LOGGERS = (api_logger, loader_logger, registry_logger)
