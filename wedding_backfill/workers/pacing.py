"""Fixed-schedule pacing for third-party APIs (short delay per item, longer pause per batch)"""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class DelaySchedule:
    """Fixed delays; no adaptive backoff"""

    def __init__(self, item_delay: float, batch_pause: float, sleep: SleepFunc = asyncio.sleep):
        self.item_delay = item_delay
        self.batch_pause = batch_pause
        self._sleep = sleep

    async def after_item(self) -> None:
        if self.item_delay > 0:
            await self._sleep(self.item_delay)

    async def throttle(self) -> None:
        """Delay between two requests made for the same item"""
        await self.after_item()

    async def after_batch(self) -> None:
        if self.batch_pause > 0:
            logger.info(f"⏸️ Pausing {self.batch_pause:g}s before next batch...")
            await self._sleep(self.batch_pause)
