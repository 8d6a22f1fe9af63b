import asyncio
import logging
import os
from typing import Optional

from .common.telegram_logging_handler import TelegramLogHandler

debug = False
_telegram_handler: Optional[TelegramLogHandler] = None


def mute_logging_for_tests():
    """Disable Logfire/Telegram logging side effects when running the test suite.

    Setting the ``SKIP_LOGFIRE`` environment variable to one of
    ``{"1", "true", "yes", "on"}`` has the same effect.
    """
    global debug
    debug = True


def _should_skip_logfire() -> bool:
    if debug:
        return True

    skip_env = os.getenv("SKIP_LOGFIRE", "").strip().lower()
    if skip_env in {"1", "true", "yes", "on"}:
        return True

    return "PYTEST_CURRENT_TEST" in os.environ


def setup_logging():
    global _telegram_handler
    if _should_skip_logfire():
        logging.basicConfig(level=logging.DEBUG)
        return

    import logfire

    from .common.bot import get_bot

    logfire.configure()

    _telegram_handler = TelegramLogHandler(bot=get_bot())
    _telegram_handler.setFormatter(
        logging.Formatter(
            "[%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )

    logging.basicConfig(
        handlers=[logfire.LogfireLoggingHandler(), _telegram_handler],
        level=logging.DEBUG,
    )
    logfire.install_auto_tracing(
        modules=["media_relay.relay", "media_relay.database"],
        min_duration=0.01,
        check_imported_modules="ignore",
    )


def get_telegram_handler() -> Optional[TelegramLogHandler]:
    return _telegram_handler


def register_alert_chat(loop: asyncio.AbstractEventLoop, chat_id: int) -> None:
    """Point warning/error alerts at ``chat_id`` once the loop is running."""
    if _telegram_handler:
        _telegram_handler.attach(loop, chat_id)


# Silence known chatty loggers
CHATTY_LOGGERS = [
    "hpack.hpack",
    "httpcore.http2",
    "httpcore.connection",
    "aiohttp.access",
    "aiogram.event",
]
for logger_name in CHATTY_LOGGERS:
    logging.getLogger(logger_name).setLevel(logging.WARNING)
