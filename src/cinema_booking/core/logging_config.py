"""
Structured JSON logging with per-request trace IDs

Booking code passes showtime_id, booking_id and seat_ids through `extra`;
they become top-level fields of the JSON record.
"""
import contextvars
import logging
import uuid
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from cinema_booking.core import clock
from cinema_booking.core.config import settings

SERVICE_NAME = 'cinema-booking'

trace_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar('trace_id', default=None)

EXTRA_FIELDS = ('showtime_id', 'booking_id', 'seat_ids', 'duration_ms', 'status_code')


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON records tagged with service, version and the current trace ID"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = clock.utcnow().isoformat()
        log_record['level'] = record.levelname
        log_record['service'] = SERVICE_NAME
        log_record['version'] = settings.APP_VERSION

        trace_id = get_trace_id()
        if trace_id:
            log_record['trace_id'] = trace_id

        for field in EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value


class _ServiceHandlerMixin:
    """Marks handlers installed by setup_logging so a second call can replace them"""
    owned_by = SERVICE_NAME


class _StreamHandler(_ServiceHandlerMixin, logging.StreamHandler):
    pass


class _FileHandler(_ServiceHandlerMixin, logging.FileHandler):
    pass


def setup_logging() -> logging.Logger:
    """Install JSON handlers on the root logger (console, plus LOG_FILE if set)"""
    formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(name)s %(message)s')

    handlers = [_StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(_FileHandler(settings.LOG_FILE))

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, 'owned_by', None) == SERVICE_NAME:
            root_logger.removeHandler(handler)
            handler.close()

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(settings.LOG_LEVEL.upper())

    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    return root_logger


def get_trace_id() -> Optional[str]:
    return trace_id_var.get()


def set_trace_id(trace_id: str):
    trace_id_var.set(trace_id)


def generate_trace_id() -> str:
    return uuid.uuid4().hex
