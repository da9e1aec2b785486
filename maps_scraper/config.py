"""Configuration management for the maps scraper.

Handles all application configuration including environment variables, the
YAML config file, and default settings. Provides structured configuration
classes for the traversal timings, export, the Telegram operator bot, and the
registry of selector strategies.
"""

import logging
from pathlib import Path
from typing import Any
from urllib.parse import quote_plus

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import ExportFormat
from .scrapers.selectors import SelectorRegistry, SelectorStrategy

logger = logging.getLogger(__name__)

MAPS_BASE_URL = "https://www.google.com/maps"


class ScraperConfig(BaseSettings):
    """Traversal engine timings and browser host settings.

    Attributes:
        click_delay: Pause between two card scrapes, seconds.
        scroll_wait: Settle time after scrolling the feed, seconds.
        detail_timeout: Upper bound on waiting for the detail view, seconds.
        detail_poll_interval: Detail view polling interval, seconds.
        settle_delay: Pause after the detail view is ready, seconds.
        max_scroll_fails: Consecutive no-progress scroll cycles before stopping.
        selector_version: Selector strategy version to use.
        query: Search query opened by the browser host.
        start_url: Page opened when no query is configured.
        headless: Run the browser without a window.
        block_media: Abort image, media and font requests.
        navigation_timeout_ms: Timeout for opening the start page.
    """

    model_config = SettingsConfigDict(env_prefix="SCRAPER_")

    click_delay: float = Field(default=0.1, ge=0)
    scroll_wait: float = Field(default=1.5, ge=0)
    detail_timeout: float = Field(default=3.0, gt=0)
    detail_poll_interval: float = Field(default=0.1, gt=0)
    settle_delay: float = Field(default=0.5, ge=0)
    max_scroll_fails: int = Field(default=3, ge=1)
    selector_version: str = "default"
    query: str | None = None
    start_url: str = MAPS_BASE_URL
    headless: bool = True
    block_media: bool = True
    navigation_timeout_ms: int = 30000

    @property
    def search_url(self) -> str:
        """URL the browser host opens before a run.

        Returns:
            Search results URL for the configured query, else the start URL.
        """
        if self.query:
            return f"{MAPS_BASE_URL}/search/{quote_plus(self.query)}"
        return self.start_url


class ExportConfig(BaseSettings):
    """Export settings.

    Attributes:
        output_dir: Directory export files are written to.
        formats: Formats written at the end of an unattended run.
    """

    model_config = SettingsConfigDict(env_prefix="EXPORT_")

    output_dir: str = "data"
    formats: list[ExportFormat] = Field(
        default_factory=lambda: [ExportFormat.CSV, ExportFormat.JSON]
    )


class BotConfig(BaseSettings):
    """Telegram operator bot configuration.

    Attributes:
        bot_token: Telegram bot API token; unattended mode when missing.
        admin_chat_id: Telegram user allowed to control the scraper.
        count_every: Relay a count update to the chat every N records.
    """

    bot_token: str | None = Field(default=None, validation_alias="BOT_TOKEN")
    admin_chat_id: int | None = Field(default=None, validation_alias="ADMIN_CHAT_ID")
    count_every: int = Field(default=10, ge=1, validation_alias="BOT_COUNT_EVERY")

    @property
    def enabled(self) -> bool:
        """Determine if the operator bot should be started.

        Returns:
            True if a bot token is configured.
        """
        return bool(self.bot_token)


class Config:
    """Application configuration manager.

    Centralizes loading of environment variables, the YAML config file and
    default values, and owns the selector strategy registry.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to maps_scraper/config.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = Path(config_dir)
        self.bot = BotConfig()
        self.selectors = SelectorRegistry()

        file_data = self._load_file()
        self.scraper = ScraperConfig(**file_data.get("timing", {}))
        self.export = ExportConfig(**file_data.get("export", {}))
        self._register_selector_versions(file_data.get("selectors", {}))

    def _load_file(self) -> dict[str, Any]:
        """Load scraper.yml from the config directory.

        Returns:
            Parsed YAML content, empty dict when the file is missing.
        """
        path = self.config_dir / "scraper.yml"
        if not path.exists():
            return {}

        with open(path) as f:
            data = yaml.safe_load(f)

        return data or {}

    def _register_selector_versions(self, versions: dict[str, Any]) -> None:
        """Register selector strategy versions declared in the config file.

        Args:
            versions: Mapping of version name to ``{base, overrides}``.
        """
        for version, entry in (versions or {}).items():
            entry = entry or {}
            self.selectors.register_overrides(
                version, entry.get("overrides", {}), base=entry.get("base", "default")
            )
            logger.info(f"Loaded selector strategy '{version}' from config")

    @property
    def selector_strategy(self) -> SelectorStrategy:
        """Selector strategy picked by ``scraper.selector_version``."""
        return self.selectors.get(self.scraper.selector_version)


# Global configuration instance
config = Config()
