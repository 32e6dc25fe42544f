"""
Scrape configuration and settings management.
"""
import os
from dataclasses import dataclass, field
from typing import List
from urllib.parse import urlparse

from .exceptions import ConfigError


BASE_URL = "https://www.mobile.bg"
DEFAULT_START_URL = (
    "https://www.mobile.bg/obiavi/avtomobili-dzhipove/ot-2008/do-2015/namira-se-v-balgariya"
    "?price=7000&price1=15000&km=150000"
)
DEFAULT_KEYWORDS = ["първи", "първият", "първия", "история"]
DEFAULT_IMPORT_PHRASE = "нов внос"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name, "")
    items = [x.strip() for x in raw.split(",") if x.strip()]
    return items or list(default)


@dataclass
class ScrapeConfig:
    """Settings consumed by the traversal engine."""

    start_url: str = DEFAULT_START_URL
    max_pages: int = 0  # 0 = unlimited
    delay_ms: int = 0
    keywords: List[str] = field(default_factory=lambda: list(DEFAULT_KEYWORDS))
    import_phrase: str = DEFAULT_IMPORT_PHRASE
    encoding: str = "windows-1251"
    timeout_ms: int = 10_000
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls) -> "ScrapeConfig":
        """Build a config from MOBILEBG_* environment variables."""
        return cls(
            start_url=os.getenv("MOBILEBG_START_URL", DEFAULT_START_URL),
            max_pages=_env_int("MOBILEBG_MAX_PAGES", 0),
            delay_ms=_env_int("MOBILEBG_DELAY_MS", 0),
            keywords=_env_list("MOBILEBG_KEYWORDS", DEFAULT_KEYWORDS),
            import_phrase=os.getenv("MOBILEBG_IMPORT_PHRASE", DEFAULT_IMPORT_PHRASE),
            encoding=os.getenv("MOBILEBG_ENCODING", "windows-1251"),
            timeout_ms=_env_int("MOBILEBG_TIMEOUT_MS", 10_000),
        )

    def validate(self) -> None:
        """Validate configuration before a run."""
        parsed = urlparse(self.start_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"Start URL must be absolute: {self.start_url!r}")
        if self.max_pages < 0:
            raise ConfigError("max_pages must be >= 0")
        if self.delay_ms < 0:
            raise ConfigError("delay_ms must be >= 0")
        if self.timeout_ms <= 0:
            raise ConfigError("timeout_ms must be > 0")
        if not [k for k in self.keywords if k and k.strip()]:
            raise ConfigError("At least one keyword is required")
