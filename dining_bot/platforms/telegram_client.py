"""
Telegram frontend - long-polling application that feeds text messages to the
command router, and the sender used to deliver messages to Telegram chats.
"""

import logging

from telegram import BotCommand, Bot, Update, User
from telegram.error import TelegramError
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from dining_bot.channels import Channel, TelegramChannel
from dining_bot.commands.base import Author, IncomingMessage
from dining_bot.commands.router import CommandHandler
from dining_bot.errors import SendError

logger = logging.getLogger(__name__)

BOT_COMMANDS = [
    BotCommand("menu", "Where is a food being served today"),
    BotCommand("register", "Get a daily report for a food"),
    BotCommand("deregister", "Stop the daily report for a food"),
    BotCommand("room", "Classes meeting in a room"),
    BotCommand("events", "Today's campus events"),
    BotCommand("help", "Show usage"),
]


class TelegramSender:
    """Delivers messages through the Telegram Bot API"""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_text(self, channel: Channel, text: str) -> None:
        try:
            await self.bot.send_message(chat_id=channel.address, text=text)
        except TelegramError as e:
            raise SendError(f"Telegram error: {e}") from e


def telegram_author(user: User, owner_id: int) -> Author:
    # Only first_name is guaranteed
    name = user.first_name
    if user.last_name:
        name = f"{name} {user.last_name}"
    if user.username:
        name = f"{name} ({user.username})"
    return Author(user_id=user.id, display_name=name, is_owner=user.id == owner_id)


def build_telegram_application(token: str, handler: CommandHandler, owner_id: int) -> Application:
    """Create the application and route every text message to the handler"""

    async def on_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        if message is None or message.text is None or update.effective_user is None:
            return
        await handler.handle_message(
            IncomingMessage(
                text=message.text,
                author=telegram_author(update.effective_user, owner_id),
                channel=TelegramChannel(message.chat_id),
            )
        )

    # Each update runs in its own task so a slow lookup doesn't stall the others
    application = Application.builder().token(token).concurrent_updates(True).build()
    application.add_handler(MessageHandler(filters.TEXT, on_message))
    return application


async def start_telegram(application: Application) -> None:
    await application.initialize()
    await application.start()
    await application.bot.set_my_commands(BOT_COMMANDS)
    await application.updater.start_polling(allowed_updates=["message"])
    logger.info(f"Connected to Telegram as {application.bot.username}")


async def stop_telegram(application: Application) -> None:
    if application.updater and application.updater.running:
        await application.updater.stop()
    if application.running:
        await application.stop()
    await application.shutdown()
    logger.info("Telegram client stopped")
