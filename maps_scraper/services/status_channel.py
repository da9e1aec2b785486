"""Status channels carrying push notifications from the engine.

A channel is anything with an async ``publish(notification)``. The engine
only talks to channels through ``StatusNotifier``, which makes every
notification fire-and-forget: a channel failure (observer gone, network
error) is logged and never reaches the traversal loop.
"""

import asyncio
import logging
from typing import Protocol

from ..models import Notification

logger = logging.getLogger(__name__)


class StatusChannel(Protocol):
    """Sink for engine notifications."""

    async def publish(self, notification: Notification) -> None:
        """Deliver one notification."""
        ...


class StatusNotifier:
    """Typed, failure-isolating front end of a status channel."""

    def __init__(self, channel: StatusChannel) -> None:
        self.channel = channel

    async def update_count(self, count: int) -> None:
        await self._send(Notification(action="updateCount", count=count))

    async def update_progress(self, message: str) -> None:
        await self._send(Notification(action="updateProgress", message=message))

    async def scraping_complete(self, count: int) -> None:
        await self._send(Notification(action="scrapingComplete", count=count))

    async def scraping_error(self, message: str) -> None:
        await self._send(Notification(action="scrapingError", message=message))

    async def _send(self, notification: Notification) -> None:
        try:
            await self.channel.publish(notification)
        except Exception as e:
            logger.debug(f"Status notification '{notification.action}' dropped: {e}")


class LoggingStatusChannel:
    """Writes notifications to the log."""

    def __init__(self, name: str = __name__) -> None:
        self.logger = logging.getLogger(name)

    async def publish(self, notification: Notification) -> None:
        if notification.action == "scrapingError":
            self.logger.error(f"[status] {notification.message}")
        elif notification.action == "updateProgress":
            self.logger.debug(f"[status] {notification.message}")
        else:
            self.logger.info(f"[status] {notification.action}: {notification.count}")


class QueueStatusChannel:
    """Buffers notifications in an asyncio queue for an in-process observer."""

    def __init__(self, maxsize: int = 0) -> None:
        self.queue: asyncio.Queue[Notification] = asyncio.Queue(maxsize=maxsize)

    async def publish(self, notification: Notification) -> None:
        self.queue.put_nowait(notification)

    def drain(self) -> list[Notification]:
        """Remove and return every buffered notification."""
        items: list[Notification] = []
        while not self.queue.empty():
            items.append(self.queue.get_nowait())
        return items


class FanoutStatusChannel:
    """Publishes each notification to several channels."""

    def __init__(self, *channels: StatusChannel) -> None:
        self.channels = channels

    async def publish(self, notification: Notification) -> None:
        for channel in self.channels:
            try:
                await channel.publish(notification)
            except Exception as e:
                logger.warning(f"Channel {type(channel).__name__} failed: {e}")
