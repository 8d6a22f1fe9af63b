import asyncio
import html
import logging
import time
from collections import deque
from concurrent.futures import Future
from typing import Deque, Optional, Tuple

from aiogram import Bot

from .utils import remove_lines_to_fit_len


class TelegramLogHandler(logging.Handler):
    """
    Forwards warnings and errors to the owner's private chat.

    The owner is only known after the chat administrators have been fetched,
    so records are buffered until :meth:`attach` supplies the event loop and
    the target chat. Delivery is throttled and identical consecutive records
    are dropped to survive error storms (e.g. a failing store on every tick).
    """

    MAX_MESSAGE_BODY = 3600
    MAX_TELEGRAM_LENGTH = 4096

    def __init__(
        self,
        bot: Bot,
        *,
        throttling_window: float = 60.0,
        throttling_capacity: int = 10,
        dedupe_window: float = 15.0,
    ) -> None:
        super().__init__(level=logging.WARNING)
        self._bot = bot
        self._chat_id: Optional[int] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Deque[Tuple[str, logging.LogRecord]] = deque(maxlen=50)
        self._sent_at: Deque[float] = deque(maxlen=throttling_capacity)
        self._throttling_window = throttling_window
        self._dedupe_window = dedupe_window
        self._last_key: Optional[str] = None
        self._last_sent_at = 0.0
        self._tasks: set[asyncio.Task] = set()

    @property
    def chat_id(self) -> Optional[int]:
        return self._chat_id

    def attach(self, loop: asyncio.AbstractEventLoop, chat_id: int) -> None:
        """Start delivering to ``chat_id`` and flush what was buffered."""
        self._loop = loop
        self._chat_id = chat_id
        pending = list(self._pending)
        self._pending.clear()
        for text, record in pending:
            self._deliver(text, record)

    def emit(self, record: logging.LogRecord) -> None:
        # Delivery failures are reported by aiogram itself; never loop on them
        if record.name.startswith(("aiogram", __name__)):
            return

        try:
            text = self._render(record)
        except Exception:
            self.handleError(record)
            return

        if self._loop is None or self._chat_id is None:
            self._pending.append((text, record))
            return

        self._deliver(text, record)

    def _deliver(self, text: str, record: logging.LogRecord) -> None:
        key = f"{record.levelno}:{record.name}:{record.getMessage()}"
        if self._is_duplicate(key) or not self._has_capacity():
            return

        now = time.monotonic()
        self._last_key = key
        self._last_sent_at = now
        self._sent_at.append(now)

        assert self._loop is not None
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            task = self._loop.create_task(self._send(text))
            self._tasks.add(task)
            task.add_done_callback(lambda t: self._on_done(t, record))
        else:
            future: Future = asyncio.run_coroutine_threadsafe(
                self._send(text), self._loop
            )
            future.add_done_callback(lambda f: self._on_done(f, record))

    def _render(self, record: logging.LogRecord) -> str:
        body = html.escape(
            remove_lines_to_fit_len(self.format(record), self.MAX_MESSAGE_BODY)
        )

        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(record.created))
        text = (
            f"<b>{html.escape(record.levelname)}</b> · "
            f"<code>{html.escape(record.name)}</code>\n"
            f"<code>{timestamp}</code>\n\n<pre>{body}</pre>"
        )
        if len(text) > self.MAX_TELEGRAM_LENGTH:
            text = text[: self.MAX_TELEGRAM_LENGTH - 1] + "…"
        return text

    async def _send(self, text: str) -> None:
        await self._bot.send_message(
            self._chat_id,
            text,
            parse_mode="HTML",
            disable_web_page_preview=True,
        )

    def _on_done(self, done, record: logging.LogRecord) -> None:
        if isinstance(done, asyncio.Task):
            self._tasks.discard(done)
        if done.cancelled():
            return
        exc = done.exception()
        if exc:
            record.exc_info = (exc.__class__, exc, exc.__traceback__)
            self.handleError(record)

    def _has_capacity(self) -> bool:
        now = time.monotonic()
        while self._sent_at and now - self._sent_at[0] > self._throttling_window:
            self._sent_at.popleft()
        limit = self._sent_at.maxlen or 0
        return limit <= 0 or len(self._sent_at) < limit

    def _is_duplicate(self, key: str) -> bool:
        return (
            key == self._last_key
            and time.monotonic() - self._last_sent_at < self._dedupe_window
        )
