"""
Notification pass: look up each subscription's food and send the report to
its channel. One subscription failing never stops the others.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List

from dining_bot.channels import ChannelDispatcher
from dining_bot.errors import FetchError
from dining_bot.menu_search import MenuSearchEngine
from dining_bot.subscriptions import Subscription

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    checked: int = 0
    delivered: int = 0
    lookup_failures: int = 0
    send_failures: int = 0


async def notify_subscriber(
    subscription: Subscription,
    engine: MenuSearchEngine,
    dispatcher: ChannelDispatcher,
    result: BatchResult,
) -> None:
    """Send today's report for one subscription, or a 'couldn't check' notice"""
    channel, food = subscription.channel, subscription.query
    logger.info(f"Checking on {channel.encode()} for {food}")
    result.checked += 1

    try:
        report = await engine.report_for(food)
    except FetchError as e:
        logger.warning(f"Couldn't check for {food!r} on {channel.encode()}: {e}")
        result.lookup_failures += 1
        await dispatcher.reply(channel, f"Couldn't check for {food}")
        return
    except Exception as e:
        logger.exception(f"Unexpected error checking {food!r} for {channel.encode()}: {e}")
        result.lookup_failures += 1
        await dispatcher.reply(channel, f"Couldn't check for {food}")
        return

    if await dispatcher.reply(channel, report):
        result.delivered += 1
    else:
        result.send_failures += 1


async def check_for_foods(
    subscriptions: List[Subscription],
    engine: MenuSearchEngine,
    dispatcher: ChannelDispatcher,
    concurrency: int = 4,
) -> BatchResult:
    """
    Run one batch pass over a registry snapshot.

    Subscriptions are started in snapshot order, at most `concurrency` at a
    time. Menu refreshes stay serialized inside MenuCache.
    """
    result = BatchResult()
    semaphore = asyncio.Semaphore(concurrency)

    async def worker(subscription: Subscription) -> None:
        async with semaphore:
            await notify_subscriber(subscription, engine, dispatcher, result)

    await asyncio.gather(*(worker(sub) for sub in subscriptions))
    logger.info(
        f"Batch pass done: {result.checked} checked, {result.delivered} delivered, "
        f"{result.lookup_failures} lookup failures, {result.send_failures} send failures"
    )
    return result
