import asyncio
from unittest.mock import MagicMock, patch

import pytest

from media_relay import logging_setup


def test_logfire_is_skipped_in_tests():
    assert logging_setup._should_skip_logfire()


@pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
def test_skip_logfire_env(monkeypatch, value):
    monkeypatch.setattr(logging_setup, "debug", False)
    monkeypatch.delenv("PYTEST_CURRENT_TEST", raising=False)
    monkeypatch.setenv("SKIP_LOGFIRE", value)

    assert logging_setup._should_skip_logfire()


def test_logfire_enabled_outside_tests(monkeypatch):
    monkeypatch.setattr(logging_setup, "debug", False)
    monkeypatch.delenv("PYTEST_CURRENT_TEST", raising=False)
    monkeypatch.delenv("SKIP_LOGFIRE", raising=False)

    assert not logging_setup._should_skip_logfire()


def test_register_alert_chat_attaches_handler():
    handler = MagicMock()
    loop = asyncio.new_event_loop()
    try:
        with patch.object(logging_setup, "_telegram_handler", handler):
            logging_setup.register_alert_chat(loop, 42)
    finally:
        loop.close()

    handler.attach.assert_called_once_with(loop, 42)


def test_register_alert_chat_without_handler():
    with patch.object(logging_setup, "_telegram_handler", None):
        logging_setup.register_alert_chat(MagicMock(), 42)

    assert logging_setup.get_telegram_handler() is None
