"""
Types shared by all chat commands.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from dining_bot.channels import Channel, ChannelDispatcher
from dining_bot.menu_search import MenuSearchEngine
from dining_bot.page_client import PageClient
from dining_bot.rooms import RoomDirectory
from dining_bot.services.scheduler import SchedulerLoop
from dining_bot.subscriptions import SubscriptionRegistry


@dataclass
class Author:
    """Platform-neutral sender of an inbound message"""
    user_id: int
    # Telegram: "first last (username)", Discord: "name#discriminator"
    display_name: str
    is_owner: bool = False


@dataclass
class IncomingMessage:
    text: str
    author: Author
    channel: Channel


@dataclass
class BotServices:
    """Shared state handed to every command"""
    engine: MenuSearchEngine
    registry: SubscriptionRegistry
    dispatcher: ChannelDispatcher
    scheduler: SchedulerLoop
    rooms: RoomDirectory
    page_client: PageClient
    events_url: str
    stop_event: asyncio.Event = field(default_factory=asyncio.Event)

    async def reply(self, message: IncomingMessage, text: str) -> bool:
        return await self.dispatcher.reply(message.channel, text)


Command = Callable[[BotServices, IncomingMessage, str], Awaitable[None]]
