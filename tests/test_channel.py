"""Tests for the stdlib logging bridge."""

import logging
import sys
from unittest.mock import MagicMock, patch

import pytest

from flask_rollbar.channel import RollbarChannel


def _record(msg, level=logging.INFO, name="app", exc_info=None, **extra):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="app.py",
        lineno=1,
        msg=msg,
        args=None,
        exc_info=exc_info,
    )
    record.__dict__.update(extra)
    return record


@pytest.fixture
def handler():
    return MagicMock()


@pytest.fixture
def channel(handler):
    return RollbarChannel(lambda: handler)


class TestEmit:
    def test_forwards_message_and_level(self, channel, handler):
        channel.emit(_record("hello", level=logging.WARNING))
        handler.log.assert_called_once_with("warning", "hello", {})

    def test_custom_levels(self, channel, handler):
        channel.emit(_record("hello", level=70))
        handler.log.assert_called_once_with("emergency", "hello", {})

    def test_context_from_extra(self, channel, handler):
        context = {"tags": {"one": "two"}}
        channel.emit(_record("hello", context=context))
        handler.log.assert_called_once_with("info", "hello", {"tags": {"one": "two"}})
        assert handler.log.call_args.args[2] is not context

    def test_exception_as_message(self, channel, handler):
        exc = RuntimeError("boom")
        channel.emit(_record(exc, level=logging.ERROR))
        handler.log.assert_called_once_with("error", exc, {})

    def test_exc_info_becomes_message(self, channel, handler):
        try:
            raise ValueError("bad")
        except ValueError:
            record = _record("Exception on /x [GET]", level=logging.ERROR, exc_info=sys.exc_info())

        channel.emit(record)

        level, message, context = handler.log.call_args.args
        assert level == "error"
        assert isinstance(message, ValueError)
        assert context == {"log_message": "Exception on /x [GET]"}

    @pytest.mark.parametrize("name", ["rollbar", "rollbar.lib", "flask_rollbar.client"])
    def test_ignores_own_and_sdk_loggers(self, channel, handler, name):
        channel.emit(_record("hello", name=name))
        handler.log.assert_not_called()

    def test_similar_names_are_not_ignored(self, channel, handler):
        channel.emit(_record("hello", name="rollbarish"))
        handler.log.assert_called_once()

    def test_handler_resolved_per_record(self, handler):
        resolve = MagicMock(return_value=handler)
        channel = RollbarChannel(resolve)
        channel.emit(_record("one"))
        channel.emit(_record("two"))
        assert resolve.call_count == 2

    def test_failures_go_to_handle_error(self, channel, handler):
        handler.log.side_effect = ConnectionError("down")
        record = _record("hello")
        with patch.object(channel, "handleError") as handle_error:
            channel.emit(record)
        handle_error.assert_called_once_with(record)

    def test_works_through_a_logger(self, channel, handler):
        logger = logging.getLogger("test_channel.bridge")
        logger.setLevel(logging.DEBUG)
        logger.addHandler(channel)
        try:
            logger.info("hi %s", "there", extra={"context": {"foo": "bar"}})
        finally:
            logger.removeHandler(channel)
        handler.log.assert_called_once_with("info", "hi there", {"foo": "bar"})
