from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Union


class SubmissionKind(Enum):
    PHOTO = "photo"
    VIDEO = "video"
    ANIMATION = "animation"


class RejectionReason(Enum):
    GROUPED_MEDIA = "grouped_media"
    TEXT_ONLY = "text_only"
    NO_ALLOWED_CONTENT = "no_allowed_content"


REJECTION_MESSAGES = {
    RejectionReason.GROUPED_MEDIA: "Media groups are not supported yet :(",
    RejectionReason.TEXT_ONLY: "No text only content :(",
    RejectionReason.NO_ALLOWED_CONTENT: "No allowed content found :(",
}


@dataclass(frozen=True, slots=True)
class Rejection:
    reason: RejectionReason

    @property
    def message(self) -> str:
        """Short text shown to the sender."""
        return REJECTION_MESSAGES[self.reason]


@dataclass(frozen=True, slots=True)
class CaptionProperties:
    """Caption bundle copied from the source message.

    Only the keys that were present on the message are kept, so an empty
    bundle means the media is re-sent without any caption.
    """

    caption: Optional[str] = None
    parse_mode: Optional[str] = None
    caption_entities: Optional[List[Dict[str, Any]]] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.caption is None
            and self.parse_mode is None
            and self.caption_entities is None
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("caption", self.caption),
                ("parse_mode", self.parse_mode),
                ("caption_entities", self.caption_entities),
            )
            if value is not None
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> CaptionProperties:
        data = data or {}
        return cls(
            caption=data.get("caption"),
            parse_mode=data.get("parse_mode"),
            caption_entities=data.get("caption_entities"),
        )


@dataclass(frozen=True, slots=True)
class Submission:
    kind: SubmissionKind
    media_ref: str
    properties: CaptionProperties = field(default_factory=CaptionProperties)

    def to_document(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "media_ref": self.media_ref,
            "properties": self.properties.to_dict(),
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> Submission:
        return cls(
            kind=SubmissionKind(document["kind"]),
            media_ref=document["media_ref"],
            properties=CaptionProperties.from_dict(document.get("properties")),
        )


EncodeResult = Union[Submission, Rejection]


@dataclass(frozen=True, slots=True)
class QueueRecord:
    record_id: int
    submission: Submission


class ModerationOutcome(Enum):
    AUTO_ACCEPT = "auto_accept"
    PENDING_REVIEW = "pending_review"
    REFUSED = "refused"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class ModerationDecision:
    outcome: ModerationOutcome
    submission: Optional[Submission] = None
    rejection: Optional[Rejection] = None
    reason: Optional[str] = None


@dataclass(frozen=True, slots=True)
class AdministratorSet:
    admin_ids: FrozenSet[int]
    owner_id: int

    def is_privileged(self, user_id: Optional[int]) -> bool:
        return user_id is not None and user_id in self.admin_ids
