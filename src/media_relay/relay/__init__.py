"""
Submission relay core.

- codec: inbound message -> Submission or Rejection
- administrators: privileged users of the relay chat
- moderation: auto-accept / review / refuse workflow
- publisher: re-sending stored submissions
- scheduler: adaptive, self-rescheduling publishing
"""

from .administrators import OwnerNotFoundError, fetch_administrators
from .codec import encode_message, pick_caption_properties
from .moderation import ModerationWorkflow
from .scheduler import PostScheduler

__all__ = [
    "OwnerNotFoundError",
    "fetch_administrators",
    "encode_message",
    "pick_caption_properties",
    "ModerationWorkflow",
    "PostScheduler",
]
