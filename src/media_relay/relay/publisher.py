import logging
from typing import Any, Dict, Optional

from aiogram import Bot, types
from aiogram.types import MessageEntity

from ..common.utils import retry_on_network_error
from ..types import Submission, SubmissionKind

logger = logging.getLogger(__name__)


def build_send_kwargs(submission: Submission) -> Dict[str, Any]:
    """Caption arguments for the send_* call, only those actually captured"""
    props = submission.properties
    kwargs: Dict[str, Any] = {}
    if props.caption is not None:
        kwargs["caption"] = props.caption
    if props.parse_mode is not None:
        kwargs["parse_mode"] = props.parse_mode
    if props.caption_entities is not None:
        kwargs["caption_entities"] = [
            MessageEntity.model_validate(entity) for entity in props.caption_entities
        ]
    return kwargs


@retry_on_network_error
async def send_submission(
    bot: Bot,
    chat_id: int,
    submission: Submission,
    reply_markup: Optional[types.InlineKeyboardMarkup] = None,
) -> types.Message:
    """Re-send a stored submission by its file id, without re-uploading"""
    kwargs = build_send_kwargs(submission)
    if reply_markup is not None:
        kwargs["reply_markup"] = reply_markup

    if submission.kind is SubmissionKind.PHOTO:
        return await bot.send_photo(chat_id, photo=submission.media_ref, **kwargs)
    if submission.kind is SubmissionKind.VIDEO:
        return await bot.send_video(chat_id, video=submission.media_ref, **kwargs)
    if submission.kind is SubmissionKind.ANIMATION:
        return await bot.send_animation(
            chat_id, animation=submission.media_ref, **kwargs
        )

    raise ValueError(f"Unsupported submission kind: {submission.kind}")
