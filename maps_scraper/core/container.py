"""Dependency-injection container.

This module defines a dependency-injection (DI) container that wires together
the application's components. The document accessor and the status channel
only exist once the browser page is open and the operator surface is chosen,
so they are declared as dependencies and provided by ``main``.
"""

from dependency_injector import containers, providers

from maps_scraper.bot.controller import ScraperController
from maps_scraper.config import Config
from maps_scraper.scrapers.traversal import TraversalEngine
from maps_scraper.services.browser import HeadlessBrowser
from maps_scraper.services.exporter import RecordExporter
from maps_scraper.services.record_store import RecordStore


class Container(containers.DeclarativeContainer):
    """DI container for the application.

    This container holds the wiring for all the application's components.
    """

    settings = providers.Dependency(instance_of=Config)
    document = providers.Dependency()
    status_channel = providers.Dependency()

    # Services
    browser = providers.Singleton(
        HeadlessBrowser,
        headless=settings.provided.scraper.headless,
        block_media=settings.provided.scraper.block_media,
    )
    record_store = providers.Singleton(RecordStore)
    exporter = providers.Singleton(RecordExporter, output_dir=settings.provided.export.output_dir)

    # Engine and operator surface
    engine = providers.Singleton(
        TraversalEngine,
        document=document,
        channel=status_channel,
        selectors=settings.provided.selector_strategy,
        settings=settings.provided.scraper,
        store=record_store,
    )
    controller = providers.Singleton(ScraperController, engine=engine, exporter=exporter)
