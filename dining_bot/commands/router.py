"""
Command router - turns an inbound chat message into a command call.
Shared by the Telegram and Discord frontends.
"""

import logging
from typing import Dict, Optional, Tuple

from dining_bot.commands.admin import quit_command, run_command
from dining_bot.commands.base import BotServices, Command, IncomingMessage
from dining_bot.commands.info import echo_command, events_command, help_command, room_command
from dining_bot.commands.menu import menu_command
from dining_bot.commands.register import deregister_command, register_command

logger = logging.getLogger(__name__)

COMMAND_PREFIXES = ("!", "/")

COMMANDS: Dict[str, Command] = {
    "menu": menu_command,
    "register": register_command,
    "deregister": deregister_command,
    "run": run_command,
    "quit": quit_command,
    "help": help_command,
    "echo": echo_command,
    "room": room_command,
    "events": events_command,
}


def parse_command(text: str) -> Optional[Tuple[str, str]]:
    """
    Split '!menu pizza' or '/menu@SomeBot pizza' into ('menu', 'pizza').
    Returns None for text that isn't a command.
    """
    if not text or text[0] not in COMMAND_PREFIXES:
        return None
    name, _, args = text[1:].partition(" ")
    name = name.split("@", 1)[0].lower()
    if not name:
        return None
    return name, args.strip()


class CommandHandler:
    """Dispatches inbound messages to commands"""

    def __init__(self, services: BotServices):
        self.services = services

    async def handle_message(self, message: IncomingMessage) -> None:
        author = message.author
        logger.info(f"{author.display_name}: {author.user_id} says: {message.text}")

        parsed = parse_command(message.text)
        if parsed is None:
            # It's not a command, so we don't care about it
            return
        name, args = parsed

        command = COMMANDS.get(name)
        if command is None:
            logger.debug(f"Unknown command {name!r}")
            return

        try:
            await command(self.services, message, args)
        except Exception as e:
            logger.exception(f"Command {name!r} from {message.channel.encode()} failed: {e}")
            await self.services.reply(message, "Something went wrong, please try again later")
