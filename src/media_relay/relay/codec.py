"""
Conversion of inbound Telegram messages into queue-ready submissions.

Everything here is pure: no I/O, no state. Unsupported content is reported
as a :class:`Rejection` value instead of an exception.
"""

from typing import Optional

from aiogram import types

from ..types import (
    CaptionProperties,
    EncodeResult,
    Rejection,
    RejectionReason,
    Submission,
    SubmissionKind,
)


def is_forwarded(message: types.Message) -> bool:
    return (
        getattr(message, "forward_origin", None) is not None
        or getattr(message, "forward_date", None) is not None
    )


def forward_origin_chat_id(message: types.Message) -> Optional[int]:
    """Id of the channel or group a forwarded message originally came from"""
    origin = getattr(message, "forward_origin", None)
    if origin is not None:
        chat = getattr(origin, "chat", None) or getattr(origin, "sender_chat", None)
        return chat.id if chat is not None else None

    legacy_chat = getattr(message, "forward_from_chat", None)
    return legacy_chat.id if legacy_chat is not None else None


def pick_caption_properties(message: types.Message) -> CaptionProperties:
    # Forwards are re-posted without their original caption
    if is_forwarded(message):
        return CaptionProperties()

    entities = message.caption_entities
    return CaptionProperties(
        caption=message.caption,
        parse_mode=getattr(message, "parse_mode", None),
        caption_entities=(
            [entity.model_dump(exclude_none=True) for entity in entities]
            if entities is not None
            else None
        ),
    )


def encode_message(message: types.Message) -> EncodeResult:
    if message.media_group_id:
        return Rejection(RejectionReason.GROUPED_MEDIA)

    if message.photo:
        # The first size is used as-is; Telegram lists sizes smallest first
        return Submission(
            kind=SubmissionKind.PHOTO,
            media_ref=message.photo[0].file_id,
            properties=pick_caption_properties(message),
        )

    if message.video:
        return Submission(
            kind=SubmissionKind.VIDEO,
            media_ref=message.video.file_id,
            properties=pick_caption_properties(message),
        )

    if message.animation:
        return Submission(
            kind=SubmissionKind.ANIMATION,
            media_ref=message.animation.file_id,
            properties=pick_caption_properties(message),
        )

    if message.text:
        return Rejection(RejectionReason.TEXT_ONLY)

    return Rejection(RejectionReason.NO_ALLOWED_CONTENT)
