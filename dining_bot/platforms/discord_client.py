"""
Discord frontend - gateway client that feeds channel messages to the command
router, and the sender used to deliver messages to Discord channels.
"""

import logging

import discord

from dining_bot.channels import Channel, DiscordChannel
from dining_bot.commands.base import Author, IncomingMessage
from dining_bot.commands.router import CommandHandler
from dining_bot.errors import NotConfiguredError, SendError

logger = logging.getLogger(__name__)


def discord_author(user: discord.abc.User, owner_id: int) -> Author:
    if user.discriminator and user.discriminator != "0":
        name = f"{user.name}#{user.discriminator}"
    else:
        name = user.name
    return Author(user_id=user.id, display_name=name, is_owner=user.id == owner_id)


class DiningDiscordClient(discord.Client):
    """Routes every non-self message to the command handler"""

    def __init__(self, handler: CommandHandler, owner_id: int):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)
        self.handler = handler
        self.owner_id = owner_id

    async def on_ready(self) -> None:
        logger.info(f"Connected to Discord as {self.user.name}")
        logger.info(f"Connected to servers: {', '.join(guild.name for guild in self.guilds)}")

    async def on_resumed(self) -> None:
        logger.info("Resumed")

    async def on_message(self, message: discord.Message) -> None:
        # We don't want to respond to ourselves, e.g. our own help output
        if message.author == self.user:
            return
        await self.handler.handle_message(
            IncomingMessage(
                text=message.content,
                author=discord_author(message.author, self.owner_id),
                channel=DiscordChannel(message.channel.id),
            )
        )


class DiscordSender:
    """Delivers messages through the connected Discord client"""

    def __init__(self, client: discord.Client):
        self.client = client

    async def send_text(self, channel: Channel, text: str) -> None:
        if not self.client.is_ready():
            raise NotConfiguredError("discord")
        try:
            target = self.client.get_channel(channel.address)
            if target is None:
                target = await self.client.fetch_channel(channel.address)
            await target.send(text)
        except discord.DiscordException as e:
            raise SendError(f"Discord error: {e}") from e
