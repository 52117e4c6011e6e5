"""
Message destinations across chat platforms.

A Channel is one of a closed set of frozen dataclasses, one per platform. Each
variant knows its persisted encoding, its command prefix, its message size
limit and how to render help text. Delivery goes through ChannelDispatcher,
which routes to whichever platform sender is registered at runtime.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Protocol, Tuple, Union

from dining_bot.errors import NotConfiguredError, SendError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscordChannel:
    channel_id: int

    platform: ClassVar[str] = "discord"
    prefix: ClassVar[str] = "!"
    max_message_length: ClassVar[int] = 2000

    @property
    def address(self) -> int:
        return self.channel_id

    def encode(self) -> str:
        return f"{self.platform} {self.channel_id}"

    def render_help(self, usage: List[Tuple[str, str]]) -> List[str]:
        width = max(len(f"{self.prefix}{command}") for command, _ in usage)
        return [
            f"```{f'{self.prefix}{command}'.ljust(width)} | {description}```"
            for command, description in usage
        ]


@dataclass(frozen=True)
class TelegramChannel:
    chat_id: int

    platform: ClassVar[str] = "telegram"
    prefix: ClassVar[str] = "/"
    max_message_length: ClassVar[int] = 4096

    @property
    def address(self) -> int:
        return self.chat_id

    def encode(self) -> str:
        return f"{self.platform} {self.chat_id}"

    def render_help(self, usage: List[Tuple[str, str]]) -> List[str]:
        return [f"{self.prefix}{command} => {description}" for command, description in usage]


Channel = Union[DiscordChannel, TelegramChannel]

CHANNEL_TYPES = {cls.platform: cls for cls in (DiscordChannel, TelegramChannel)}
ADDRESS_PATTERN = re.compile(r"-?[0-9]+")


def parse_channel(platform: str, address: str) -> Channel:
    """
    Rebuild a channel from its persisted platform tag and decimal address.

    Raises:
        ValueError: Unknown platform or non-numeric address
    """
    channel_type = CHANNEL_TYPES.get(platform)
    if channel_type is None:
        raise ValueError(f"unknown platform '{platform}'")
    if not ADDRESS_PATTERN.fullmatch(address):
        raise ValueError(f"address '{address}' is not a decimal integer")
    return channel_type(int(address))


def split_message(text: str, limit: int) -> List[str]:
    """Split text into chunks of at most `limit` chars, preferring line breaks"""
    if len(text) <= limit:
        return [text]

    chunks: List[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


class MessageSender(Protocol):
    """Platform-specific delivery of one text message"""

    async def send_text(self, channel: Channel, text: str) -> None:
        ...


class ChannelDispatcher:
    """Routes messages to the sender registered for each channel's platform"""

    def __init__(self, send_timeout: float = 10.0):
        self.send_timeout = send_timeout
        self._senders: Dict[str, MessageSender] = {}

    def register(self, platform: str, sender: MessageSender) -> None:
        self._senders[platform] = sender
        logger.info(f"Registered sender for {platform}")

    def unregister(self, platform: str) -> None:
        self._senders.pop(platform, None)

    def is_configured(self, platform: str) -> bool:
        return platform in self._senders

    async def send(self, channel: Channel, text: str) -> None:
        """
        Deliver text to a channel.

        Raises:
            NotConfiguredError: No sender registered for the channel's platform
            SendError: The platform rejected the message or the send timed out
        """
        sender = self._senders.get(channel.platform)
        if sender is None:
            raise NotConfiguredError(channel.platform)

        for chunk in split_message(text, channel.max_message_length):
            try:
                await asyncio.wait_for(sender.send_text(channel, chunk), self.send_timeout)
            except asyncio.TimeoutError:
                raise SendError(f"Send to {channel.encode()} timed out after {self.send_timeout}s")

    async def reply(self, channel: Channel, text: str) -> bool:
        """Send, logging instead of raising on failure. Returns whether it was delivered."""
        try:
            await self.send(channel, text)
            return True
        except NotConfiguredError:
            logger.warning(f"Trying to send message to {channel.platform} when not connected to {channel.platform}!")
        except SendError as e:
            logger.error(f"Failed to send message to {channel.encode()}: {e}")
        return False
