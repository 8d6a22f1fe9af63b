"""
Adaptive re-publishing of queued submissions.

Every ``post_interval`` (plus a random offset) the scheduler decides whether
to post: the chance grows with the backlog and posting only happens inside
the active-hours window. When it posts, it publishes a random number of
submissions between ``min_post_count`` and ``max_post_count``.
"""

import asyncio
import logging
import math
import random
from datetime import datetime, timezone
from typing import Optional

from aiogram import Bot

from ..common.config import RelayConfig
from ..common.mp import track
from ..common.utils import PERMANENT_ERRORS
from ..database.queue_operations import (
    count_submissions,
    insert_submission,
    take_random_submission,
)
from ..types import AdministratorSet, QueueRecord
from .publisher import send_submission

logger = logging.getLogger(__name__)


class PostScheduler:
    def __init__(
        self,
        bot: Bot,
        administrators: AdministratorSet,
        config: RelayConfig,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.bot = bot
        self.administrators = administrators
        self.settings = config.scheduler
        # Debug runs post to the owner instead of the public chat
        self.target_chat_id = (
            administrators.owner_id if config.debug else config.chat_id
        )
        self.rng = rng or random.Random()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tick_task: Optional[asyncio.Task] = None
        self._stopped = False

    @property
    def has_pending_tick(self) -> bool:
        return self._timer is not None

    def compute_post_chance(self, backlog: int) -> float:
        if backlog <= 0:
            return 0.0
        return min(
            self.settings.base_post_chance
            * (backlog / self.settings.base_post_chance_backlog),
            1.0,
        )

    def current_hour(self) -> int:
        now = datetime.now(timezone.utc)
        return (now.hour + self.settings.utc_offset_hours) % 24

    def is_active_hour(self, hour: int) -> bool:
        return self.settings.min_hour < hour < self.settings.max_hour

    def pick_batch_size(self) -> int:
        spread = self.settings.max_post_count - self.settings.min_post_count
        # Half-up rounding, not Python's banker's rounding
        return math.floor(self.settings.min_post_count + self.rng.random() * spread + 0.5)

    def next_delay(self) -> float:
        return (
            self.settings.post_interval
            + self.settings.post_interval_offset * self.rng.random()
        )

    def start(self) -> None:
        self._stopped = False
        delay = self.schedule()
        logger.info(f"Post scheduler started, first tick in {delay:.0f}s")

    def stop(self) -> None:
        self._stopped = True
        self.cancel()
        if self._tick_task is not None and not self._tick_task.done():
            self._tick_task.cancel()

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def schedule(self) -> float:
        """Replace the pending tick with a freshly randomized one"""
        self.cancel()
        if self._stopped:
            return 0.0

        delay = self.next_delay()
        self._timer = asyncio.get_running_loop().call_later(delay, self._fire)
        logger.debug(f"Next post tick in {delay:.0f}s")
        return delay

    def _fire(self) -> None:
        self._timer = None
        self._tick_task = asyncio.get_running_loop().create_task(self.tick())

    async def tick(self) -> int:
        published = 0
        try:
            backlog = await count_submissions()
            chance = self.compute_post_chance(backlog)
            hour = self.current_hour()

            if backlog > 0 and self.is_active_hour(hour) and self.rng.random() < chance:
                batch_size = self.pick_batch_size()
                published = await self.publish_random(batch_size)
                track(
                    self.target_chat_id,
                    "scheduled_batch_published",
                    {
                        "backlog": backlog,
                        "chance": chance,
                        "requested": batch_size,
                        "published": published,
                    },
                )
            else:
                logger.debug(
                    f"Skipping post tick: backlog={backlog}, chance={chance:.2f}, hour={hour}"
                )
        except Exception as e:
            logger.error(f"Scheduled post tick failed: {e}", exc_info=True)
        finally:
            self.schedule()

        return published

    async def trigger(self, count: int) -> int:
        """Publish ``count`` submissions now and restart the tick countdown"""
        self.schedule()
        return await self.publish_random(count)

    async def publish_random(self, count: int) -> int:
        sent = 0
        for _ in range(count):
            record = await take_random_submission()
            if record is None:
                logger.info(f"Queue drained after {sent} of {count} posts")
                break
            if await self._publish_record(record):
                sent += 1
        return sent

    async def _publish_record(self, record: QueueRecord) -> bool:
        try:
            await send_submission(self.bot, self.target_chat_id, record.submission)
        except PERMANENT_ERRORS as e:
            # Telegram will never accept this one (e.g. expired file id)
            logger.warning(f"Dropping queue record {record.record_id}: {e}")
            return False
        except (Exception, asyncio.CancelledError):
            # Already taken from the store; a cancelled send must not lose it
            await asyncio.shield(insert_submission(record.submission))
            raise
        return True
