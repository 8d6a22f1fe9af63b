"""
Inbound update plumbing.

Updates (from long polling or the webhook) are put on an ``asyncio.Queue``.
A single dispatch loop drains it and feeds each update to the aiogram
dispatcher in its own task, so a slow handler never blocks the others.
"""

import asyncio
import logging
from typing import Optional

import logfire
from aiogram import Bot, Dispatcher
from aiogram.dispatcher.event.bases import UNHANDLED
from aiogram.types import Update

from .common.config import TransportConfig

logger = logging.getLogger(__name__)

ALLOWED_UPDATES = ["message", "callback_query"]

UpdateQueue = asyncio.Queue


class PollingError(RuntimeError):
    """Long polling failed; the process is expected to be restarted."""


async def poll_updates(bot: Bot, queue: UpdateQueue, timeout: int = 30) -> None:
    offset: Optional[int] = None
    while True:
        try:
            updates = await bot.get_updates(
                offset=offset, timeout=timeout, allowed_updates=ALLOWED_UPDATES
            )
        except Exception as e:
            logger.critical(f"Polling error: {e}", exc_info=True)
            raise PollingError(str(e)) from e

        for update in updates:
            offset = update.update_id + 1
            await queue.put(update)


async def process_update(dp: Dispatcher, bot: Bot, update: Update):
    """Feed one update to the dispatcher; failures are logged, never raised"""
    with logfire.span("Update: handling...", update_id=update.update_id) as span:
        try:
            result = await dp.feed_update(bot, update)
        except Exception as e:
            span.record_exception(e)
            span.tags = ["unhandled_exception"]
            logger.error(
                f"Error while handling update {update.update_id}: {e}", exc_info=True
            )
            return None

        if result is UNHANDLED:
            span.tags = ["unhandled"]
        elif isinstance(result, str):
            span.tags = [result]
        return result


async def dispatch_updates(dp: Dispatcher, bot: Bot, queue: UpdateQueue) -> None:
    tasks: set[asyncio.Task] = set()
    try:
        while True:
            update = await queue.get()
            task = asyncio.create_task(process_update(dp, bot, update))
            tasks.add(task)
            task.add_done_callback(tasks.discard)
            queue.task_done()
    finally:
        for task in tasks:
            task.cancel()


async def run_polling(
    dp: Dispatcher, bot: Bot, queue: UpdateQueue, config: TransportConfig
) -> None:
    # getUpdates is refused while a webhook is registered
    await bot.delete_webhook(drop_pending_updates=False)
    logger.warning("Polling started")

    dispatcher = asyncio.create_task(dispatch_updates(dp, bot, queue))
    try:
        await poll_updates(bot, queue, timeout=config.poll_timeout)
    finally:
        dispatcher.cancel()
