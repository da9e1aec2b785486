"""Application entry point.

Opens the configured Google Maps search in a headless browser and runs the
traversal engine in one of two modes. With ``BOT_TOKEN`` set, a Telegram bot
lets the admin start, stop, inspect and export the run. Without it, one
unattended run scrapes the feed to completion and writes the configured
export formats.
"""

import asyncio
import logging

from dependency_injector import providers
from telegram.ext import Application

from .bot.handlers import register_handlers
from .bot.status import TelegramStatusChannel
from .config import config
from .core.container import Container
from .exceptions import FeedNotFoundError
from .services.status_channel import FanoutStatusChannel, LoggingStatusChannel, StatusChannel

# Logging
logging.basicConfig(
    format="%(asctime)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


async def initialize_resources(container: Container, channel: StatusChannel) -> None:
    """Start the browser, open the search page and wire the engine.

    Args:
        container: Application container.
        channel: Status channel the engine pushes notifications to.
    """
    await container.browser().start()
    await open_search_page(container, channel)


async def open_search_page(container: Container, channel: StatusChannel) -> None:
    """Open the search page in the started browser and wire the engine."""
    settings = container.settings()
    document = await container.browser().open_page(
        settings.scraper.search_url,
        ready_selector=settings.selector_strategy.feed,
        timeout=settings.scraper.navigation_timeout_ms,
    )
    container.document.override(providers.Object(document))
    container.status_channel.override(providers.Object(channel))
    logger.info(f"Using selector strategy '{settings.scraper.selector_version}'")


async def cleanup_resources(container: Container) -> None:
    """Stop a running traversal and close the browser."""
    try:
        controller = container.controller()
        await controller.handle({"action": "stop"})
        await controller.wait_until_idle()
    except Exception as e:
        logger.warning(f"Error stopping scraper: {e}")

    await container.browser().stop()
    logger.info("Browser closed")


async def run_unattended(container: Container) -> None:
    """Scrape the feed once and write the configured export formats.

    Raises:
        FeedNotFoundError: If the opened page has no result feed.
    """
    settings = container.settings()
    async with container.browser():
        await open_search_page(container, LoggingStatusChannel("maps_scraper.status"))
        engine = container.engine()
        reason = await engine.run()
        if reason is None:
            raise FeedNotFoundError(
                "No result feed on the opened page", {"url": settings.scraper.search_url}
            )

        records = engine.store.records
        if not records:
            logger.warning("Run finished without records, nothing exported")
            return

        for path in container.exporter().write_all(records, settings.export.formats):
            logger.info(f"Wrote {path}")


def main() -> None:
    """Main application entry point.

    Starts the Telegram operator bot when a bot token is configured,
    otherwise runs one unattended scrape.

    Raises:
        RuntimeError: If a bot token is set without ADMIN_CHAT_ID.
    """
    container = Container(settings=config)

    if not config.bot.enabled:
        logger.info("BOT_TOKEN not set; running unattended")
        asyncio.run(run_unattended(container))
        return

    if not config.bot.admin_chat_id:
        raise RuntimeError("Set ADMIN_CHAT_ID environment variable")

    # Create application
    app = Application.builder().token(config.bot.bot_token).build()

    async def post_init(application: Application) -> None:
        channel = FanoutStatusChannel(
            LoggingStatusChannel("maps_scraper.status"),
            TelegramStatusChannel(
                application.bot, config.bot.admin_chat_id, count_every=config.bot.count_every
            ),
        )
        await initialize_resources(container, channel)
        application.bot_data["controller"] = container.controller()

    async def post_shutdown(application: Application) -> None:
        await cleanup_resources(container)

    app.post_init = post_init
    app.post_shutdown = post_shutdown

    register_handlers(app)

    logger.info("Starting bot in polling mode")
    app.run_polling()


if __name__ == "__main__":
    main()
