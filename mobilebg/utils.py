"""
Utility functions for text processing, URL handling and logging.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urljoin


TAG_RE = re.compile(r"<[^>]*>")
NON_DIGIT_RE = re.compile(r"[^0-9]")


def init_logger(
    name: str = "mobilebg",
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_file: Optional[str] = "mobilebg.log"
) -> logging.Logger:
    """Initialize logger with console and optional file handlers."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return logger

    console_level_num = getattr(logging, console_level.upper(), logging.INFO)
    ch = logging.StreamHandler()
    ch.setLevel(console_level_num)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file:  # Create file handler only if log_file is provided
        file_level_num = getattr(logging, file_level.upper(), logging.DEBUG)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level_num)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


def get_logger(logger: Optional[logging.Logger] = None) -> logging.Logger:
    """Return the given logger or the package logger."""
    return logger or logging.getLogger("mobilebg")


def now_iso() -> str:
    """Return current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def clean_text(s: Optional[str]) -> str:
    """Clean and normalize text by removing extra whitespace."""
    if not s:
        return ""
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def strip_tags(html: Optional[str]) -> str:
    """Replace every tag with a space and collapse whitespace."""
    if not html:
        return ""
    return clean_text(TAG_RE.sub(" ", html))


def only_digits(s: Optional[str]) -> str:
    """
    Keep ASCII digits only.

    "12 500 лв." -> "12500", "1.9" -> "19", None -> "".
    """
    if not s:
        return ""
    return NON_DIGIT_RE.sub("", str(s))


def absolutize(href: str, base_url: str) -> str:
    """
    Resolve a listing or paging href against the page it was found on.

    Protocol-relative links ("//www.mobile.bg/...") get the base URL's scheme.
    """
    href = (href or "").strip()
    if not href:
        return ""
    return urljoin(base_url, href)
