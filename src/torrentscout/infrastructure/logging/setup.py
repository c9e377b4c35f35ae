"""structlog over stdlib logging, emitted from a background thread.

Every record, structlog-originated or foreign, is put on an in-memory
queue by the root logger and rendered by a ``QueueListener`` thread, so
log I/O never runs on the event loop.  Output goes to one stream (stderr
by default); stdout is reserved for command output.
"""

from __future__ import annotations

import atexit
import copy
import logging
import queue
import sys
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from typing import Any, Optional, TextIO

import structlog

from torrentscout.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

# Capped at WARNING unless the configured level is DEBUG.
NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "asyncio")

_listener: Optional[QueueListener] = None


def _stamp_foreign_record(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Timestamp foreign records with their creation time.

    The listener formats records later than they were created; structlog's
    own events are stamped at call time by ``TimeStamper`` instead.
    """
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        event_dict["timestamp"] = created.isoformat().replace("+00:00", "Z")
    return event_dict


def build_renderer(config: AppConfig) -> structlog.typing.Processor:
    if config.log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def build_processor_formatter(config: AppConfig) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            _stamp_foreign_record,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            build_renderer(config),
        ],
    )


class _EventDictQueueHandler(QueueHandler):
    """Enqueue a shallow copy of the record, leaving ``record.msg`` as is.

    The stock ``prepare()`` formats the message into a string, which would
    flatten the event dict ``ProcessorFormatter`` renders from.
    """

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        return copy.copy(record)


def stop_logging() -> None:
    """Drain the queue and stop the listener thread.  Safe to call twice."""
    global _listener
    listener, _listener = _listener, None
    if listener is not None:
        listener.stop()


def _route_root_through_queue(level: str) -> "queue.Queue[logging.LogRecord]":
    records: queue.Queue[logging.LogRecord] = queue.Queue()

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_EventDictQueueHandler(records))
    root.setLevel(level)

    # Loggers created before this point may carry their own handlers.
    for name in list(logging.root.manager.loggerDict):
        existing = logging.getLogger(name)
        existing.handlers.clear()
        existing.propagate = True
        existing.setLevel(logging.NOTSET)

    if level != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    return records


def configure_logging(config: AppConfig, *, stream: TextIO | None = None) -> None:
    """Configure structlog and start the background listener."""
    global _listener

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    stop_logging()
    handler = logging.StreamHandler(stream=stream if stream is not None else sys.stderr)
    handler.setFormatter(build_processor_formatter(config))

    records = _route_root_through_queue(config.log_level)
    _listener = QueueListener(records, handler, respect_handler_level=True)
    _listener.start()
    atexit.register(stop_logging)

    log.info(
        "logging_configured", log_format=config.log_format, log_level=config.log_level
    )
