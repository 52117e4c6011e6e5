"""
help / echo / room / events commands
"""

import asyncio
import logging

from dining_bot.commands.base import BotServices, IncomingMessage
from dining_bot.errors import FetchError
from dining_bot.events import fetch_events

logger = logging.getLogger(__name__)

USAGE = [
    ("menu [food name]", "tells you where that food is being served today"),
    ("register [food name]", "schedules it to tell you each day where that food is being served that day"),
    ("deregister [food name]", "stops the daily check for that food"),
    ("room [room name]", "lists the classes that meet in that room"),
    ("events", "lists today's campus events"),
]

# Pause between multi-message replies to stay under rate limits
MESSAGE_PACING_SECONDS = 0.1


async def help_command(bot: BotServices, message: IncomingMessage, args: str) -> None:
    """Show usage, formatted for the channel's platform"""
    for line in message.channel.render_help(USAGE):
        await bot.reply(message, line)


async def echo_command(bot: BotServices, message: IncomingMessage, text: str) -> None:
    await bot.reply(message, text or "(nothing to echo)")


async def room_command(bot: BotServices, message: IncomingMessage, room: str) -> None:
    """List the class sections meeting in a room"""
    if not room:
        await bot.reply(message, f"Usage: {message.channel.prefix}room [room name]")
        return
    if room not in bot.rooms:
        await bot.reply(message, f"Room {room} not found on SPIRE")
        return

    await bot.reply(message, f"Room {room}: ")
    for section in bot.rooms.sections(room):
        await asyncio.sleep(MESSAGE_PACING_SECONDS)
        await bot.reply(message, section.format())


async def events_command(bot: BotServices, message: IncomingMessage, args: str) -> None:
    """List today's campus events, one message each"""
    try:
        events = await fetch_events(bot.page_client, bot.events_url)
    except FetchError as e:
        logger.warning(f"Events lookup failed: {e}")
        await bot.reply(message, "Couldn't get today's events")
        return

    await bot.reply(message, "Today's events are:")
    for event in events:
        await asyncio.sleep(MESSAGE_PACING_SECONDS)
        await bot.reply(message, event.format())
