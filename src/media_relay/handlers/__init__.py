# Import order defines handler priority on the shared dispatcher:
# commands first, then plain submissions.
from . import callback_handlers, command_handlers, message_handlers
from .dp import dp

__all__ = ["dp", "callback_handlers", "command_handlers", "message_handlers"]
