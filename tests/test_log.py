"""Tests for logging sinks."""

import logging

import pytest

from vantuz.log import Logger, NoopLogger, StdLogger


class TestNoopLogger:
    def test_is_logger(self) -> None:
        assert isinstance(NoopLogger(), Logger)

    def test_discards_events(self) -> None:
        logger = NoopLogger()
        logger.debug("%s: %s", "GET", "http://x")
        logger.error("", RuntimeError("boom"))


class TestStdLogger:
    def test_is_logger(self) -> None:
        assert isinstance(StdLogger(), Logger)

    def test_default_logger_name(self) -> None:
        assert StdLogger().logger.name == "vantuz"

    def test_debug_formats_args(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="vantuz"):
            StdLogger().debug("%s: %s", "GET", "http://x")
        assert caplog.records[0].getMessage() == "GET: http://x"
        assert caplog.records[0].levelno == logging.DEBUG

    def test_error_without_context(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="vantuz"):
            StdLogger().error("", RuntimeError("boom"))
        assert caplog.records[0].getMessage() == "boom"
        assert caplog.records[0].levelno == logging.ERROR

    def test_error_with_context(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="custom"):
            StdLogger(logging.getLogger("custom")).error("token", RuntimeError("expired"))
        assert caplog.records[0].getMessage() == "token: expired"
