"""
UMass Dining Bot - Main Entry Point
Wires the menu cache, subscription registry, scheduler and chat platforms together.
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import discord

from dining_bot.channels import ChannelDispatcher, DiscordChannel, TelegramChannel
from dining_bot.clock import ScheduleClock
from dining_bot.commands.base import BotServices
from dining_bot.commands.router import CommandHandler
from dining_bot.config import BotConfig, get_config
from dining_bot.errors import FetchError, ListenerFileError
from dining_bot.menu_cache import MenuCache
from dining_bot.menu_search import MenuSearchEngine
from dining_bot.page_client import PageClient
from dining_bot.platforms.discord_client import DiningDiscordClient, DiscordSender
from dining_bot.platforms.telegram_client import (
    TelegramSender,
    build_telegram_application,
    start_telegram,
    stop_telegram,
)
from dining_bot.rooms import RoomDirectory
from dining_bot.services.scheduler import SchedulerLoop
from dining_bot.subscriptions import SubscriptionRegistry

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="UMass dining menu bot")
    parser.add_argument("--no-telegram", action="store_true", help="don't connect to Telegram")
    parser.add_argument("--no-discord", action="store_true", help="don't connect to Discord")
    return parser.parse_args(argv)


def watch_platform_task(task: asyncio.Task, dispatcher: ChannelDispatcher, platform: str) -> None:
    """When a platform client's task ends, stop routing messages to that platform"""

    def on_done(finished: asyncio.Task) -> None:
        dispatcher.unregister(platform)
        if finished.cancelled():
            return
        error = finished.exception()
        if error is not None:
            logger.error(f"{platform} client stopped, {platform} messages will not be sent: {error!r}")
        else:
            logger.warning(f"{platform} client disconnected")

    task.add_done_callback(on_done)


def start_discord(client: discord.Client, token: str, dispatcher: ChannelDispatcher) -> asyncio.Task:
    """Connect the Discord client in the background and register its sender"""
    dispatcher.register(DiscordChannel.platform, DiscordSender(client))
    task = asyncio.create_task(client.start(token))
    watch_platform_task(task, dispatcher, DiscordChannel.platform)
    return task


async def run(config: BotConfig, run_telegram: bool = True, run_discord: bool = True) -> None:
    """Run until a quit command sets the stop event"""
    registry = SubscriptionRegistry.load(config.listeners_file)
    rooms = RoomDirectory.load(config.rooms_file)

    page_client = PageClient(timeout=config.fetch_timeout)
    clock = ScheduleClock(config.utc_offset_hours, config.schedule_hour, config.schedule_minute)
    cache = MenuCache(
        page_client,
        clock,
        base_url=config.menu_base_url,
        serve_stale=config.serve_stale_menus,
        retry_seconds=config.refresh_retry_seconds,
    )
    try:
        await cache.ensure_fresh()
    except FetchError as e:
        logger.error(f"Initial menu fetch failed, will retry on first lookup: {e}")

    engine = MenuSearchEngine(cache, clock)
    dispatcher = ChannelDispatcher(send_timeout=config.send_timeout)
    scheduler = SchedulerLoop(registry, engine, dispatcher, clock, config.send_concurrency)
    services = BotServices(
        engine=engine,
        registry=registry,
        dispatcher=dispatcher,
        scheduler=scheduler,
        rooms=rooms,
        page_client=page_client,
        events_url=config.events_url,
    )
    handler = CommandHandler(services)

    telegram_app = None
    if run_telegram and config.has_telegram:
        telegram_app = build_telegram_application(
            config.telegram_bot_token, handler, config.telegram_owner_id
        )
        await start_telegram(telegram_app)
        dispatcher.register(TelegramChannel.platform, TelegramSender(telegram_app.bot))
    elif run_telegram:
        logger.warning("TELEGRAM_BOT_TOKEN not set, Telegram disabled")

    discord_client = None
    discord_task = None
    if run_discord and config.has_discord:
        discord_client = DiningDiscordClient(handler, config.discord_owner_id)
        discord_task = start_discord(discord_client, config.discord_bot_token, dispatcher)
    elif run_discord:
        logger.warning("DISCORD_BOT_TOKEN not set, Discord disabled")

    scheduler_task = asyncio.create_task(scheduler.run_forever())
    logger.info("Background food checker started")

    waiters = {asyncio.create_task(services.stop_event.wait()), scheduler_task}
    if discord_task is not None:
        background = waiters | {discord_task}
    else:
        background = waiters

    try:
        done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            if task is not scheduler_task:
                continue
            if not task.cancelled() and task.exception() is not None:
                logger.error(f"Background task stopped: {task.exception()!r}")
    finally:
        for task in background:
            task.cancel()
        if telegram_app is not None:
            await stop_telegram(telegram_app)
        if discord_client is not None:
            await discord_client.close()
        await page_client.aclose()
        logger.info("Bot stopped")


def main(argv: Optional[List[str]] = None) -> None:
    """Start the bot"""
    args = parse_args(argv)

    # Configure logging
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    # Decide whether or not to run telegram or discord connection
    run_telegram = not args.no_telegram
    run_discord = not args.no_discord
    if not run_telegram and not run_discord:
        sys.exit(0)

    config = get_config()

    try:
        asyncio.run(run(config, run_telegram=run_telegram, run_discord=run_discord))
    except ListenerFileError as e:
        logger.critical(f"Refusing to start with a corrupt listener file: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    sys.exit(0)


if __name__ == "__main__":
    main()
