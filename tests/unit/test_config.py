"""Tests for configuration loading and selector strategy versions."""

import pytest
from pydantic import ValidationError

from maps_scraper.config import BotConfig, Config, ScraperConfig
from maps_scraper.exceptions import UnknownSelectorStrategyError
from maps_scraper.models import ExportFormat
from maps_scraper.scrapers.selectors import SelectorRegistry, SelectorStrategy


class TestSelectorRegistry:
    def test_default_strategy_is_registered(self) -> None:
        registry = SelectorRegistry()

        assert registry.versions() == ["default"]
        assert registry.get("default").feed == 'div[role="feed"]'

    def test_unknown_version(self) -> None:
        with pytest.raises(UnknownSelectorStrategyError) as exc_info:
            SelectorRegistry().get("2031-redesign")

        assert exc_info.value.version == "2031-redesign"
        assert exc_info.value.context == {"available": ["default"]}

    def test_overrides_inherit_from_base(self) -> None:
        registry = SelectorRegistry()

        strategy = registry.register_overrides("v2", {"feed": 'div[role="list"]'})

        assert strategy.version == "v2"
        assert strategy.feed == 'div[role="list"]'
        assert strategy.entry_link == registry.get("default").entry_link
        assert registry.get("default").feed == 'div[role="feed"]'


class TestSelectorStrategy:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("You've reached the end of the list.", True),
            ("You’ve reached the end of the list.", True),
            ("Showing results 1 - 20", False),
        ],
    )
    def test_end_of_feed(self, text: str, expected: bool) -> None:
        assert SelectorStrategy().matches_end_of_feed(text) is expected

    def test_extra_end_patterns(self) -> None:
        strategy = SelectorStrategy(end_patterns=[r"you.ve reached the end", r"fin de la liste"])

        assert strategy.matches_end_of_feed("Vous êtes arrivé à la fin de la liste.")

    def test_placeholders(self) -> None:
        strategy = SelectorStrategy()

        assert strategy.is_placeholder("Results")
        assert strategy.is_placeholder("Google Maps")
        assert not strategy.is_placeholder("Results Gym")


class TestScraperConfig:
    def test_defaults(self) -> None:
        settings = ScraperConfig()

        assert settings.click_delay == 0.1
        assert settings.scroll_wait == 1.5
        assert settings.detail_timeout == 3.0
        assert settings.detail_poll_interval == 0.1
        assert settings.settle_delay == 0.5
        assert settings.max_scroll_fails == 3

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("SCRAPER_MAX_SCROLL_FAILS", "5")

        assert ScraperConfig().max_scroll_fails == 5

    def test_poll_interval_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ScraperConfig(detail_poll_interval=0)

    def test_search_url(self) -> None:
        assert ScraperConfig(query="dentists in Oakland, CA").search_url == (
            "https://www.google.com/maps/search/dentists+in+Oakland%2C+CA"
        )
        assert ScraperConfig(start_url="https://www.google.com/maps/@37.8,-122.3,13z").search_url == (
            "https://www.google.com/maps/@37.8,-122.3,13z"
        )


def test_bot_disabled_without_token(monkeypatch) -> None:
    monkeypatch.delenv("BOT_TOKEN", raising=False)

    assert not BotConfig().enabled


def test_bot_config_from_env(monkeypatch) -> None:
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    monkeypatch.setenv("ADMIN_CHAT_ID", "4242")
    monkeypatch.setenv("BOT_COUNT_EVERY", "25")

    bot = BotConfig()

    assert bot.enabled
    assert bot.admin_chat_id == 4242
    assert bot.count_every == 25


class TestConfigFile:
    def test_missing_file_uses_defaults(self, tmp_path) -> None:
        config = Config(tmp_path)

        assert config.scraper.scroll_wait == 1.5
        assert config.export.formats == [ExportFormat.CSV, ExportFormat.JSON]
        assert config.selector_strategy.version == "default"

    def test_file_sections(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("SCRAPER_SELECTOR_VERSION", "compact")
        (tmp_path / "scraper.yml").write_text(
            "timing:\n"
            "  scroll_wait: 2.5\n"
            "export:\n"
            "  output_dir: out\n"
            "  formats: [excel]\n"
            "selectors:\n"
            "  compact:\n"
            "    overrides:\n"
            "      entry_link: 'a.hfpxzc'\n"
        )

        config = Config(tmp_path)

        assert config.scraper.scroll_wait == 2.5
        assert config.export.output_dir == "out"
        assert config.export.formats == [ExportFormat.EXCEL]
        assert config.selector_strategy.version == "compact"
        assert config.selector_strategy.entry_link == "a.hfpxzc"
        assert config.selector_strategy.feed == 'div[role="feed"]'

    def test_bundled_file_registers_hotel_panel(self) -> None:
        assert "hotel-panel" in Config().selectors.versions()
