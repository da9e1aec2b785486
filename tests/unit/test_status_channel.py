"""Tests for status channels and push notification delivery."""

from unittest.mock import AsyncMock

import pytest

from maps_scraper.bot.status import TelegramStatusChannel
from maps_scraper.models import Notification
from maps_scraper.services.status_channel import (
    FanoutStatusChannel,
    LoggingStatusChannel,
    QueueStatusChannel,
    StatusNotifier,
)


class BrokenChannel:
    async def publish(self, notification: Notification) -> None:
        raise ConnectionError("observer went away")


@pytest.mark.asyncio
async def test_notifier_builds_typed_messages(channel) -> None:
    notifier = StatusNotifier(channel)

    await notifier.update_count(4)
    await notifier.update_progress("Scrolling for more results…")
    await notifier.scraping_complete(4)
    await notifier.scraping_error("No search results found.")

    assert [n.to_message() for n in channel.drain()] == [
        {"action": "updateCount", "count": 4},
        {"action": "updateProgress", "message": "Scrolling for more results…"},
        {"action": "scrapingComplete", "count": 4},
        {"action": "scrapingError", "message": "No search results found."},
    ]
    assert channel.drain() == []


@pytest.mark.asyncio
async def test_notifier_swallows_delivery_failures() -> None:
    notifier = StatusNotifier(BrokenChannel())

    await notifier.update_count(1)
    await notifier.scraping_complete(1)


@pytest.mark.asyncio
async def test_fanout_delivers_past_a_broken_channel(channel) -> None:
    fanout = FanoutStatusChannel(BrokenChannel(), LoggingStatusChannel(), channel)

    await fanout.publish(Notification(action="updateCount", count=2))

    assert [n.count for n in channel.drain()] == [2]


class TestTelegramStatusChannel:
    def setup_method(self) -> None:
        self.bot = AsyncMock()
        self.channel = TelegramStatusChannel(self.bot, chat_id=4242, count_every=10)

    @pytest.mark.asyncio
    async def test_relays_completion_and_errors(self) -> None:
        await self.channel.publish(Notification(action="scrapingComplete", count=37))
        await self.channel.publish(Notification(action="scrapingError", message="Error: boom"))

        texts = [call.kwargs["text"] for call in self.bot.send_message.await_args_list]
        assert texts == ["✅ Done: 37 places scraped", "⚠️ Error: boom"]
        assert all(call.kwargs["chat_id"] == 4242 for call in self.bot.send_message.await_args_list)

    @pytest.mark.asyncio
    async def test_counts_are_throttled(self) -> None:
        for count in range(1, 21):
            await self.channel.publish(Notification(action="updateCount", count=count))

        texts = [call.kwargs["text"] for call in self.bot.send_message.await_args_list]
        assert texts == ["📍 10 places collected", "📍 20 places collected"]

    @pytest.mark.asyncio
    async def test_progress_is_not_relayed(self) -> None:
        await self.channel.publish(Notification(action="updateProgress", message="Scraping card 1 of 20…"))

        self.bot.send_message.assert_not_awaited()
