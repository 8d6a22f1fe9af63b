import os
from typing import Optional

from aiogram import Bot

_bot: Optional[Bot] = None


def get_bot() -> Bot:
    """Return the process-wide gateway, created from ``BOT_TOKEN`` on first use."""
    global _bot
    if _bot is None:
        token = os.getenv("BOT_TOKEN")
        if not token:
            raise ValueError("BOT_TOKEN environment variable is not set")
        _bot = Bot(token=token)
    return _bot


async def close_bot() -> None:
    global _bot
    if _bot is not None:
        await _bot.session.close()
        _bot = None
