from aiogram.types import CallbackQuery

from ..relay.moderation import ModerationWorkflow
from .dp import dp


@dp.callback_query()
async def handle_review_callback(
    callback: CallbackQuery, workflow: ModerationWorkflow
) -> str:
    """Yes/No answers on review prompts sent to the owner"""
    return await workflow.handle_review(callback)
