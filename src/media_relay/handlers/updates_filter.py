from aiogram import F
from aiogram.filters import and_f

# Messages that are treated as submissions:
# 1. Not an edit of an earlier message
# 2. Not a service message (members joining, title/photo changes, pins...)
# Unsupported content (stickers, text...) still passes so the sender gets
# told why it was rejected.

filter_submission_message = and_f(
    ~F.edit_date,
    ~F.new_chat_members,
    ~F.left_chat_member,
    ~F.new_chat_title,
    ~F.new_chat_photo,
    ~F.delete_chat_photo,
    ~F.group_chat_created,
    ~F.supergroup_chat_created,
    ~F.channel_chat_created,
    ~F.message_auto_delete_timer_changed,
    ~F.pinned_message,
)
