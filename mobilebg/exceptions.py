"""
Exceptions raised by the mobile.bg scraper.
"""


class ScraperError(Exception):
    """Base exception for scraper-related errors."""
    pass


class FetchError(ScraperError):
    """Failed to fetch or decode a results page."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url


class ConfigError(ScraperError):
    """Invalid scrape configuration."""
    pass


class ReportError(ScraperError):
    """Failed to locate or read a record file for the report."""
    pass
