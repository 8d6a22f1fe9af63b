from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram.types import ChatMemberOwner, User

from media_relay.relay.administrators import (
    OwnerNotFoundError,
    build_administrator_set,
    fetch_administrators,
)


def _owner(user_id):
    return ChatMemberOwner(
        user=User(id=user_id, is_bot=False, first_name="Owner"), is_anonymous=False
    )


def _admin(user_id):
    member = MagicMock()
    member.status = "administrator"
    member.user.id = user_id
    return member


def test_build_administrator_set():
    administrators = build_administrator_set([_admin(2), _owner(1), _admin(3)])

    assert administrators.owner_id == 1
    assert administrators.admin_ids == frozenset({1, 2, 3})
    assert administrators.is_privileged(1)
    assert administrators.is_privileged(3)
    assert not administrators.is_privileged(4)
    assert not administrators.is_privileged(None)


def test_build_administrator_set_without_owner():
    with pytest.raises(OwnerNotFoundError, match="No owner found"):
        build_administrator_set([_admin(2), _admin(3)])


@pytest.mark.asyncio
async def test_fetch_administrators_queries_chat():
    bot = MagicMock()
    bot.get_chat_administrators = AsyncMock(return_value=[_owner(10), _admin(20)])

    administrators = await fetch_administrators(bot, -100)

    bot.get_chat_administrators.assert_awaited_once_with(-100)
    assert administrators.owner_id == 10
    assert administrators.admin_ids == frozenset({10, 20})
