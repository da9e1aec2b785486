"""Status channel relaying engine pushes to the admin Telegram chat."""

import logging

from telegram import Bot

from ..models import Notification
from .messages import PUSH_COMPLETE, PUSH_COUNT, PUSH_ERROR

logger = logging.getLogger(__name__)


class TelegramStatusChannel:
    """Sends completion, error and every Nth count notification to a chat.

    Progress notifications are too chatty for a messenger and are only
    logged at debug level.

    Attributes:
        chat_id: Chat receiving the notifications.
        count_every: Relay a count update every N records.
    """

    def __init__(self, bot: Bot, chat_id: int, count_every: int = 10) -> None:
        self.bot = bot
        self.chat_id = chat_id
        self.count_every = max(1, count_every)

    async def publish(self, notification: Notification) -> None:
        text = self.format(notification)
        if text is None:
            logger.debug(f"Not relayed to chat: {notification.to_message()}")
            return
        await self.bot.send_message(chat_id=self.chat_id, text=text)

    def format(self, notification: Notification) -> str | None:
        """Chat text for a notification, None when it is not relayed."""
        if notification.action == "scrapingComplete":
            return PUSH_COMPLETE.format(count=notification.count or 0)
        if notification.action == "scrapingError":
            return PUSH_ERROR.format(message=notification.message)
        if notification.action == "updateCount" and notification.count:
            if notification.count % self.count_every == 0:
                return PUSH_COUNT.format(count=notification.count)
        return None
