import logging
from typing import Optional

from aiogram import Bot, F, types
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import KeyboardButton, ReplyKeyboardMarkup

from ..database.queue_operations import count_submissions
from ..relay.scheduler import PostScheduler
from ..types import AdministratorSet
from .dp import dp

logger = logging.getLogger(__name__)

UNKNOWN_COMMAND_TEXT = "Unknown command :("


def admin_keyboard() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[
            [
                KeyboardButton(text="/queue_info"),
                KeyboardButton(text="/random_post"),
            ]
        ],
        resize_keyboard=True,
    )


def parse_post_count(args: Optional[str]) -> Optional[int]:
    """``/random_post`` posts one item by default, or N for ``/random_post N``"""
    if args is None or not args.strip():
        return 1
    args = args.strip()
    if not args.isdigit():
        return None
    return int(args)


def _sender_id(message: types.Message) -> Optional[int]:
    return message.from_user.id if message.from_user else None


async def reply_unknown_command(message: types.Message, bot: Bot) -> str:
    await bot.send_message(message.chat.id, UNKNOWN_COMMAND_TEXT)
    return "command_unknown"


@dp.message(CommandStart())
async def handle_start_command(
    message: types.Message, bot: Bot, administrators: AdministratorSet
) -> str:
    if not administrators.is_privileged(_sender_id(message)):
        await bot.send_message(message.chat.id, "Hi! Send me some memes :)")
        return "command_start_sent"

    await bot.send_message(message.chat.id, "Hi!", reply_markup=admin_keyboard())
    return "command_start_admin_sent"


@dp.message(Command("queue_info"))
async def handle_queue_info_command(
    message: types.Message, bot: Bot, administrators: AdministratorSet
) -> str:
    if not administrators.is_privileged(_sender_id(message)):
        return await reply_unknown_command(message, bot)

    count = await count_submissions()
    await bot.send_message(message.chat.id, f"Message queue size: {count}")
    return "command_queue_info_sent"


@dp.message(Command("random_post"))
async def handle_random_post_command(
    message: types.Message,
    command: CommandObject,
    bot: Bot,
    administrators: AdministratorSet,
    scheduler: PostScheduler,
) -> str:
    if not administrators.is_privileged(_sender_id(message)):
        return await reply_unknown_command(message, bot)

    count = parse_post_count(command.args)
    if count is None:
        return await reply_unknown_command(message, bot)

    published = await scheduler.trigger(count)
    logger.info(f"Manual post by {_sender_id(message)}: {published} of {count} published")
    return "command_random_post_published"


@dp.message(F.text.startswith("/"))
async def handle_unknown_command(message: types.Message, bot: Bot) -> str:
    return await reply_unknown_command(message, bot)
