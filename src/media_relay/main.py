# autoflake: skip_file

# Initialize environment variables
import dotenv

dotenv.load_dotenv()

# Initialize logging
import logging

from .logging_setup import register_alert_chat, setup_logging

setup_logging()
logger = logging.getLogger(__name__)

import asyncio
import sys

from .common.bot import close_bot, get_bot
from .common.config import ConfigError, RelayConfig
from .common.utils import load_config
from .database import close_pool, create_schema, get_pool

# Import all handlers to register them with the dispatcher
from .handlers import dp
from .relay import (
    ModerationWorkflow,
    OwnerNotFoundError,
    PostScheduler,
    fetch_administrators,
)
from .server import run_webhook
from .transport import PollingError, run_polling


async def prepare_schema() -> None:
    pool = await get_pool()
    async with pool.acquire() as conn:
        await create_schema(conn)


async def run(config: RelayConfig) -> None:
    bot = get_bot()
    try:
        await prepare_schema()

        administrators = await fetch_administrators(bot, config.chat_id)
        register_alert_chat(
            asyncio.get_running_loop(), config.log_chat_id or administrators.owner_id
        )

        workflow = ModerationWorkflow(bot, administrators, config)
        scheduler = PostScheduler(bot, administrators, config)
        dp.workflow_data.update(
            workflow=workflow, scheduler=scheduler, administrators=administrators
        )

        queue: asyncio.Queue = asyncio.Queue()
        scheduler.start()
        try:
            if config.transport.mode == "webhook":
                await run_webhook(dp, bot, queue, config.transport)
            else:
                await run_polling(dp, bot, queue, config.transport)
        finally:
            scheduler.stop()
    finally:
        await close_bot()
        await close_pool()


def main() -> None:
    try:
        config = RelayConfig.from_dict(load_config())
        asyncio.run(run(config))
    except (ConfigError, OwnerNotFoundError, PollingError) as e:
        logger.critical(f"Relay stopped: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Relay interrupted")


if __name__ == "__main__":
    main()
