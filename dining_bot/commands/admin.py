"""
run / quit commands - Trigger a batch pass now, or shut the bot down
"""

import logging

from dining_bot.commands.base import BotServices, IncomingMessage

logger = logging.getLogger(__name__)


async def run_command(bot: BotServices, message: IncomingMessage, args: str) -> None:
    """Check every registered food for every channel now"""
    await bot.reply(message, "Checking for preregistered foods")
    bot.scheduler.trigger_now()


async def quit_command(bot: BotServices, message: IncomingMessage, args: str) -> None:
    """Stop the bot (owner only)"""
    if not message.author.is_owner:
        logger.warning(
            f"Ignoring quit from non-owner {message.author.display_name} ({message.author.user_id})"
        )
        return

    await bot.reply(message, "UMass Bot Quitting")
    logger.info(f"Quit requested by {message.author.display_name}")
    bot.stop_event.set()
