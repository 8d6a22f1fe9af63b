import logging

from aiogram import types

from ..relay.moderation import ModerationWorkflow
from .dp import dp
from .updates_filter import filter_submission_message

logger = logging.getLogger(__name__)


@dp.message(filter_submission_message)
async def handle_submission_message(
    message: types.Message, workflow: ModerationWorkflow
) -> str:
    """Every non-command message is a candidate submission"""
    decision = await workflow.handle_submission(message)
    return f"submission_{decision.outcome.value}"
