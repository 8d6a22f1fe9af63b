import asyncio
import logging
from typing import Optional

from aiogram import Bot, Dispatcher
from aiogram.types import Update
from aiohttp import web

from .common.config import TransportConfig
from .transport import ALLOWED_UPDATES, UpdateQueue, dispatch_updates

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

BOT_KEY = web.AppKey("bot", Bot)
QUEUE_KEY = web.AppKey("queue", asyncio.Queue)


def extract_update_type(json: dict) -> str:
    """Name of the payload carried by a raw update, for logging"""
    update_types = [key for key in json if key != "update_id"]
    if not update_types:
        return "empty_update"
    if len(update_types) > 1:
        return "multiple_types"
    return update_types[0]


def parse_update(json, bot: Bot) -> Optional[Update]:
    if not isinstance(json, dict) or "update_id" not in json:
        return None
    return Update.model_validate(json, context={"bot": bot})


@routes.get("/health")
async def healthcheck(_: web.Request) -> web.Response:
    """Return plain OK response for health probes."""
    return web.Response(text="ok")


@routes.post("/")
async def handle_update(request: web.Request) -> web.Response:
    """Queue an incoming Telegram update and acknowledge it right away"""
    if not await request.read():
        return web.Response()

    try:
        json = await request.json()
        update = parse_update(json, request.app[BOT_KEY])
    except ValueError as e:
        # Malformed JSON or a payload aiogram cannot validate
        logger.warning(f"Received unparsable update: {e}")
        json, update = None, None

    if update is None:
        logger.warning(f"Received invalid update format: {json}")
        return web.json_response(
            {"error": "Invalid update format", "required_field": "update_id"},
            status=400,
        )

    logger.debug(f"Queued {extract_update_type(json)} update {update.update_id}")
    await request.app[QUEUE_KEY].put(update)
    return web.json_response({"message": "Queued"})


def create_app(bot: Bot, queue: UpdateQueue) -> web.Application:
    app = web.Application()
    app[BOT_KEY] = bot
    app[QUEUE_KEY] = queue
    app.add_routes(routes)
    return app


async def run_webhook(
    dp: Dispatcher, bot: Bot, queue: UpdateQueue, config: TransportConfig
) -> None:
    app = create_app(bot, queue)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=config.host, port=config.port)

    dispatcher = asyncio.create_task(dispatch_updates(dp, bot, queue))
    try:
        await site.start()
        logger.info(f"Setting webhook URL to: {config.webhook_url}")
        await bot.set_webhook(config.webhook_url, allowed_updates=ALLOWED_UPDATES)
        logger.warning("Server started")
        await asyncio.Event().wait()
    finally:
        dispatcher.cancel()
        await runner.cleanup()
