"""Tests for structlog + queue-backed stdlib logging setup."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from torrentscout.infrastructure.config import AppConfig
from torrentscout.infrastructure.logging.setup import (
    NOISY_LOGGERS,
    configure_logging,
    stop_logging,
)


@pytest.fixture()
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    stop_logging()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)
    structlog.reset_defaults()


@pytest.mark.usefixtures("restore_logging")
class TestConfigureLogging:
    def test_json_lines_to_stream(self) -> None:
        stream = io.StringIO()
        configure_logging(AppConfig(log_format="json"), stream=stream)
        structlog.get_logger("torrentscout.test").info("search_done", results=3)
        stop_logging()

        events = [json.loads(line) for line in stream.getvalue().splitlines()]
        by_name = {event["event"]: event for event in events}
        assert by_name["logging_configured"]["log_format"] == "json"
        done = by_name["search_done"]
        assert done["results"] == 3
        assert done["level"] == "info"
        assert done["logger"] == "torrentscout.test"
        assert "timestamp" in done

    def test_foreign_stdlib_records(self) -> None:
        stream = io.StringIO()
        configure_logging(AppConfig(log_format="json"), stream=stream)
        logging.getLogger("some.library").warning("plain message")
        stop_logging()

        events = [json.loads(line) for line in stream.getvalue().splitlines()]
        foreign = [e for e in events if e["event"] == "plain message"]
        assert foreign[0]["level"] == "warning"
        assert foreign[0]["timestamp"].endswith("Z")

    def test_level_filter(self) -> None:
        stream = io.StringIO()
        configure_logging(AppConfig(log_format="json", log_level="WARNING"), stream=stream)
        structlog.get_logger("x").info("hidden")
        structlog.get_logger("x").error("shown")
        stop_logging()

        text = stream.getvalue()
        assert "hidden" not in text
        assert "shown" in text

    def test_noisy_loggers_capped(self) -> None:
        configure_logging(AppConfig(log_level="INFO"), stream=io.StringIO())
        assert all(
            logging.getLogger(name).level == logging.WARNING for name in NOISY_LOGGERS
        )

    def test_debug_keeps_noisy_loggers(self) -> None:
        configure_logging(AppConfig(log_level="DEBUG"), stream=io.StringIO())
        assert logging.getLogger("httpx").level == logging.NOTSET

    def test_stop_is_idempotent(self) -> None:
        configure_logging(AppConfig(), stream=io.StringIO())
        stop_logging()
        stop_logging()
