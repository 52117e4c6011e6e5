"""
menu command - Tell the user where a food is being served today
"""

import logging

from dining_bot.commands.base import BotServices, IncomingMessage
from dining_bot.errors import FetchError

logger = logging.getLogger(__name__)


async def menu_command(bot: BotServices, message: IncomingMessage, food: str) -> None:
    """Handle the menu command"""
    if not food:
        await bot.reply(message, f"Usage: {message.channel.prefix}menu [food name]")
        return

    try:
        report = await bot.engine.report_for(food)
    except FetchError as e:
        logger.warning(f"Menu lookup for {food!r} failed: {e}")
        await bot.reply(message, f"Couldn't check the menus for {food} right now")
        return

    await bot.reply(message, report)
