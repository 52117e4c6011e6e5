"""
register / deregister commands - Manage a channel's daily food checks
"""

import logging

from dining_bot.commands.base import BotServices, IncomingMessage
from dining_bot.errors import FetchError, PersistenceError
from dining_bot.subscriptions import normalize_query

logger = logging.getLogger(__name__)


async def register_command(bot: BotServices, message: IncomingMessage, food: str) -> None:
    """Subscribe the channel to a food and report on it right away"""
    food = normalize_query(food)
    if not food:
        await bot.reply(message, f"Usage: {message.channel.prefix}register [food name]")
        return

    try:
        added = await bot.registry.add(message.channel, food)
    except PersistenceError as e:
        # Still registered for this run of the bot
        logger.error(f"Registered {food!r} for {message.channel.encode()} but couldn't save: {e}")
        added = True

    if added:
        await bot.reply(message, f"Will check for {food}")
    else:
        await bot.reply(message, f"Already checking for {food}")

    # We also want to check if the food is being served today
    try:
        report = await bot.engine.report_for(food)
    except FetchError as e:
        logger.warning(f"Initial lookup for {food!r} failed: {e}")
        await bot.reply(message, f"Couldn't check for {food}")
        return
    await bot.reply(message, report)


async def deregister_command(bot: BotServices, message: IncomingMessage, food: str) -> None:
    """Unsubscribe the channel from a food"""
    food = normalize_query(food)
    if not food:
        await bot.reply(message, f"Usage: {message.channel.prefix}deregister [food name]")
        return

    try:
        removed = await bot.registry.remove_if_present(message.channel, food)
    except PersistenceError as e:
        logger.error(f"Removed {food!r} for {message.channel.encode()} but couldn't save: {e}")
        removed = True

    if removed:
        await bot.reply(message, f"Removed {food}")
    else:
        await bot.reply(message, f"Couldn't find {food}")
