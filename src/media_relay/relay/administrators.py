import logging
from typing import Iterable

from aiogram import Bot
from aiogram.types import ChatMember

from ..types import AdministratorSet

logger = logging.getLogger(__name__)

OWNER_STATUS = "creator"


class OwnerNotFoundError(RuntimeError):
    """The monitored chat has no member with the creator status."""


def build_administrator_set(members: Iterable[ChatMember]) -> AdministratorSet:
    members = list(members)
    owner_id = next(
        (member.user.id for member in members if member.status == OWNER_STATUS),
        None,
    )
    if owner_id is None:
        raise OwnerNotFoundError("No owner found")

    return AdministratorSet(
        admin_ids=frozenset(member.user.id for member in members),
        owner_id=owner_id,
    )


async def fetch_administrators(bot: Bot, chat_id: int) -> AdministratorSet:
    """Load the privileged users of ``chat_id`` once at startup"""
    members = await bot.get_chat_administrators(chat_id)
    administrators = build_administrator_set(members)
    logger.info(
        f"Loaded {len(administrators.admin_ids)} administrators for chat {chat_id}, "
        f"owner {administrators.owner_id}"
    )
    return administrators
