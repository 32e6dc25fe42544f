#!/usr/bin/env python3
"""
Smoke tests for the package layout and small helpers.
"""
import pytest


def test_imports():
    """Test that all modules can be imported successfully."""
    from mobilebg import models, utils, markup, classify, extract, core, fetch, export, database, report, cli

    from mobilebg import ListingRecord, ScrapeConfig, PseudoDocument, run_scrape, deduplicate
    from mobilebg.utils import init_logger, now_iso, clean_text


def test_text_cleaning():
    from mobilebg.utils import clean_text, strip_tags

    assert clean_text("  Hello   World  \n") == "Hello World"
    assert clean_text(None) == ""
    assert strip_tags("<b>BMW</b><i>320</i>") == "BMW 320"
    assert strip_tags("") == ""


def test_only_digits():
    from mobilebg.utils import only_digits

    assert only_digits("12 500 лв.") == "12500"
    assert only_digits("1.9") == "19"
    assert only_digits(None) == ""


def test_absolutize():
    from mobilebg.utils import absolutize

    base = "https://www.mobile.bg/obiavi/avtomobili"
    assert absolutize("//www.mobile.bg/obiava-1-x", base) == "https://www.mobile.bg/obiava-1-x"
    assert absolutize("/obiava-1-x", base) == "https://www.mobile.bg/obiava-1-x"
    assert absolutize("https://m.mobile.bg/obiava-1-x", base) == "https://m.mobile.bg/obiava-1-x"
    assert absolutize("  ", base) == ""


def test_decode_page():
    from mobilebg.fetch import decode_page

    assert decode_page("Напред".encode("windows-1251")) == "Напред"
    assert decode_page(b"\x98ok") == "�ok"


class _FakeRequestFactory:
    def __init__(self, error):
        self.error = error

    async def new_context(self, **kwargs):
        raise self.error


class _FakePlaywright:
    def __init__(self, error):
        self.request = _FakeRequestFactory(error)
        self.stopped = False

    async def stop(self):
        self.stopped = True


def _open_fetcher(fetcher):
    import asyncio

    async def enter():
        async with fetcher:
            pass

    asyncio.run(enter())


def test_fetcher_stops_driver_when_request_context_fails(monkeypatch):
    from playwright.async_api import Error as PlaywrightError

    from mobilebg import fetch
    from mobilebg.exceptions import FetchError

    driver = _FakePlaywright(PlaywrightError("context refused"))

    class Starter:
        async def start(self):
            return driver

    monkeypatch.setattr(fetch, "async_playwright", Starter)
    fetcher = fetch.PageFetcher()
    with pytest.raises(FetchError, match="context refused"):
        _open_fetcher(fetcher)
    assert driver.stopped
    assert fetcher._playwright is None


def test_fetcher_driver_start_failure_is_fetch_error(monkeypatch):
    from playwright.async_api import Error as PlaywrightError

    from mobilebg import fetch
    from mobilebg.exceptions import FetchError

    class Starter:
        async def start(self):
            raise PlaywrightError("driver missing")

    monkeypatch.setattr(fetch, "async_playwright", Starter)
    with pytest.raises(FetchError, match="driver missing"):
        _open_fetcher(fetch.PageFetcher())


def test_listing_record_model():
    from mobilebg.models import ListingRecord

    rec = ListingRecord(link="https://www.mobile.bg/obiava-1-x", title="Test Car", year="2010")
    assert rec.as_row()[:4] == ["https://www.mobile.bg/obiava-1-x", "Test Car", "", "2010"]
    assert len(rec.as_row()) == 11


def test_config_from_env(monkeypatch):
    from mobilebg.config import ScrapeConfig
    from mobilebg.exceptions import ConfigError

    monkeypatch.setenv("MOBILEBG_MAX_PAGES", "4")
    monkeypatch.setenv("MOBILEBG_KEYWORDS", "история, първи ,")
    cfg = ScrapeConfig.from_env()
    assert cfg.max_pages == 4
    assert cfg.keywords == ["история", "първи"]
    cfg.validate()

    monkeypatch.setenv("MOBILEBG_DELAY_MS", "soon")
    with pytest.raises(ConfigError):
        ScrapeConfig.from_env()


@pytest.mark.parametrize("kwargs", [
    {"max_pages": -1},
    {"delay_ms": -5},
    {"timeout_ms": 0},
    {"keywords": [" ", ""]},
    {"start_url": "www.mobile.bg/obiavi"},
])
def test_config_validate_rejects(kwargs):
    from mobilebg.config import ScrapeConfig
    from mobilebg.exceptions import ConfigError

    with pytest.raises(ConfigError):
        ScrapeConfig(**kwargs).validate()


def test_main_scraper_import():
    """Test that the entry point module exposes main and parse_args."""
    from mobilebg import cli

    assert hasattr(cli, 'main')
    assert hasattr(cli, 'parse_args')


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
