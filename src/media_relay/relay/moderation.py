"""
Moderation of inbound submissions.

Privileged senders (administrators of the relay chat) are trusted: their media
goes straight into the queue. Everybody else is either refused (forwards from
blacklisted chats), rejected (unsupported content) or forwarded to the owner
as a Yes/No prompt. Only a "Yes" from an administrator persists the media.
"""

import logging

from aiogram import Bot, types
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from ..common.config import RelayConfig
from ..common.mp import track
from ..common.utils import format_user_display
from ..database.queue_operations import insert_submission
from ..types import (
    AdministratorSet,
    ModerationDecision,
    ModerationOutcome,
    Rejection,
)
from .codec import encode_message, forward_origin_chat_id
from .publisher import send_submission

logger = logging.getLogger(__name__)

ACCEPT_DATA = "accept"
REJECT_DATA = "reject"

NOT_WELCOME_TEXT = "This content is not welcome here :("
THANKS_TEXT = "Thanks for your contribution!"


def review_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="Yes", callback_data=ACCEPT_DATA),
                InlineKeyboardButton(text="No", callback_data=REJECT_DATA),
            ]
        ]
    )


class ModerationWorkflow:
    def __init__(
        self, bot: Bot, administrators: AdministratorSet, config: RelayConfig
    ) -> None:
        self.bot = bot
        self.administrators = administrators
        self.config = config

    def is_blacklisted(self, message: types.Message) -> bool:
        origin_chat_id = forward_origin_chat_id(message)
        return (
            origin_chat_id is not None
            and origin_chat_id in self.config.blacklisted_chat_ids
        )

    def decide(self, message: types.Message) -> ModerationDecision:
        """Classify a message without touching the chat or the store"""
        sender_id = message.from_user.id if message.from_user else None

        if not self.administrators.is_privileged(sender_id) and self.is_blacklisted(
            message
        ):
            return ModerationDecision(
                outcome=ModerationOutcome.REFUSED, reason="blacklisted"
            )

        result = encode_message(message)
        if isinstance(result, Rejection):
            return ModerationDecision(
                outcome=ModerationOutcome.REJECTED, rejection=result
            )

        if self.administrators.is_privileged(sender_id):
            return ModerationDecision(
                outcome=ModerationOutcome.AUTO_ACCEPT, submission=result
            )
        return ModerationDecision(
            outcome=ModerationOutcome.PENDING_REVIEW, submission=result
        )

    async def handle_submission(self, message: types.Message) -> ModerationDecision:
        decision = self.decide(message)
        chat_id = message.chat.id
        sender_id = message.from_user.id if message.from_user else chat_id

        if decision.outcome is ModerationOutcome.REJECTED:
            assert decision.rejection is not None
            logger.debug(f"Rejected message from {sender_id}: {decision.rejection.reason}")
            await self.bot.send_message(chat_id, decision.rejection.message)
            track(
                sender_id,
                "submission_rejected",
                {"reason": decision.rejection.reason.value},
            )

        elif decision.outcome is ModerationOutcome.REFUSED:
            await self.bot.send_message(chat_id, NOT_WELCOME_TEXT)
            track(
                sender_id,
                "submission_refused",
                {"origin_chat_id": forward_origin_chat_id(message)},
            )

        elif decision.outcome is ModerationOutcome.AUTO_ACCEPT:
            assert decision.submission is not None
            record = await insert_submission(decision.submission)
            await self.bot.delete_message(chat_id, message.message_id)
            track(
                sender_id,
                "submission_auto_accepted",
                {"record_id": record.record_id, "kind": record.submission.kind.value},
            )

        else:
            assert decision.submission is not None
            await send_submission(
                self.bot,
                self.administrators.owner_id,
                decision.submission,
                reply_markup=review_keyboard(),
            )
            await self.bot.send_message(chat_id, THANKS_TEXT)
            logger.info(f"New media from {format_user_display(message.from_user)}")
            track(
                sender_id,
                "submission_forwarded",
                {"kind": decision.submission.kind.value},
            )

        return decision

    async def handle_review(self, callback: types.CallbackQuery) -> str:
        """Apply the owner's Yes/No answer to a forwarded submission"""
        # Every prompt answer is acknowledged, authorized or not
        try:
            await self.bot.answer_callback_query(callback.id)
        except TelegramBadRequest as e:
            logger.warning(f"Failed to answer callback {callback.id}: {e}")

        if not self.administrators.is_privileged(callback.from_user.id):
            return "review_unauthorized"

        prompt = callback.message
        if not isinstance(prompt, types.Message):
            return "review_prompt_inaccessible"

        if callback.data == ACCEPT_DATA:
            result = encode_message(prompt)
            if isinstance(result, Rejection):
                await self.bot.send_message(prompt.chat.id, result.message)
                return "review_accept_rejected"

            record = await insert_submission(result)
            track(
                callback.from_user.id,
                "review_accepted",
                {"record_id": record.record_id, "kind": result.kind.value},
            )
            status = "review_accepted"

        elif callback.data == REJECT_DATA:
            track(callback.from_user.id, "review_rejected", {})
            status = "review_rejected"

        else:
            logger.warning(f"Unknown review action: {callback.data}")
            return "review_unknown_action"

        await self.bot.delete_message(prompt.chat.id, prompt.message_id)
        return status
