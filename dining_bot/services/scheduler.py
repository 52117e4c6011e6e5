"""
Daily scheduler - background task that sleeps until the scheduled time and then
checks every registered food for every channel.
"""

import asyncio
import logging
from datetime import date, datetime
from enum import Enum
from typing import Optional, Set

from dining_bot.channels import ChannelDispatcher
from dining_bot.clock import ScheduleClock
from dining_bot.menu_search import MenuSearchEngine
from dining_bot.services.notifier import BatchResult, check_for_foods
from dining_bot.subscriptions import SubscriptionRegistry

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class SchedulerLoop:
    """Runs the batch pass once a day, plus on demand"""

    def __init__(
        self,
        registry: SubscriptionRegistry,
        engine: MenuSearchEngine,
        dispatcher: ChannelDispatcher,
        clock: ScheduleClock,
        concurrency: int = 4,
    ):
        self.registry = registry
        self.engine = engine
        self.dispatcher = dispatcher
        self.clock = clock
        self.concurrency = concurrency

        self.state = SchedulerState.IDLE
        self.last_scheduled_date: Optional[date] = None
        self._background: Set[asyncio.Task] = set()
        self.stats = {
            "total_passes": 0,
            "last_pass_time": None,
            "last_result": None,
        }

    async def run_batch(self, reason: str = "scheduled") -> BatchResult:
        """Check every subscription against today's menus"""
        subscriptions = await self.registry.snapshot()
        logger.info(f"Checking for foods now! ({reason}, {len(subscriptions)} subscription(s))")

        self.state = SchedulerState.RUNNING
        try:
            result = await check_for_foods(
                subscriptions, self.engine, self.dispatcher, self.concurrency
            )
        finally:
            self.state = SchedulerState.IDLE

        self.stats["total_passes"] += 1
        self.stats["last_pass_time"] = datetime.now()
        self.stats["last_result"] = result
        return result

    def trigger_now(self) -> asyncio.Task:
        """Start a batch pass in the background, e.g. for the run command"""
        task = asyncio.create_task(self.run_batch(reason="on demand"))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def run_forever(self) -> None:
        """Sleep until the next scheduled time, run the pass, repeat"""
        while True:
            delay = self.clock.duration_until_next_run()
            logger.info(f"Seconds till scheduled: {delay.total_seconds():.0f}")
            await asyncio.sleep(delay.total_seconds())

            today = self.clock.today()
            if self.last_scheduled_date == today:
                # Woke early and already ran for today
                continue
            self.last_scheduled_date = today

            try:
                await self.run_batch()
            except Exception as e:
                logger.exception(f"Error in scheduled batch pass: {e}")
