#!/usr/bin/env python3
import asyncio
import os
import sys
from dotenv import load_dotenv

# Add src/ to Python path
sys.path.append(
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
)

load_dotenv()

from media_relay.common.bot import close_bot, get_bot
from media_relay.common.config import RelayConfig
from media_relay.common.utils import load_config
from media_relay.database import close_pool, count_submissions, get_pool
from media_relay.relay.administrators import OWNER_STATUS


async def main():
    config = RelayConfig.from_dict(load_config())
    bot = get_bot()
    await get_pool()  # Initialize the connection pool
    try:
        members = await bot.get_chat_administrators(config.chat_id)
        print(f"\nAdministrators of {config.chat_id}:")
        print("-------------------")
        for member in members:
            user = member.user
            full_name = f"{user.first_name or ''} {user.last_name or ''}".strip()
            print(f"ID: {user.id}")
            print(f'Username: {user.username or "Not set"}')
            print(f'Full Name: {full_name or "Not available"}')
            print(f"Owner: {member.status == OWNER_STATUS}")
            print("-------------------")

        print(f"Queued submissions: {await count_submissions()}")
    finally:
        await close_bot()
        await close_pool()  # Clean up the connection pool


if __name__ == "__main__":
    asyncio.run(main())
