"""
Field extraction from an included listing container.

Every field is mined independently; a pattern that does not match leaves
the field empty instead of failing the listing.
"""
import re
from typing import Optional

from .models import ListingRecord
from .utils import clean_text, only_digits, strip_tags


TITLE_ANCHOR_RE = re.compile(r'<a[^>]+class="[^"]*title[^"]*"[^>]*>([\s\S]*?)</a>', re.I)
TITLE_DIV_RE = re.compile(r'<div[^>]+class="[^"]*title[^"]*"[^>]*>([\s\S]*?)</div>', re.I)
PRICE_DIV_RE = re.compile(r'<div[^>]+class="[^"]*price[^"]*"[^>]*>([\s\S]*?)</div>', re.I)
PARAMS_DIV_RE = re.compile(r'<div[^>]+class="[^"]*params[^"]*"[^>]*>([\s\S]*?)</div>', re.I)

# Price in leva, e.g. "12 500 лв."
BGN_PRICE_RE = re.compile(r"([\d\s.,]+)\s*лв\.?", re.I)

# Patterns over the lower-cased params text
YEAR_RE = re.compile(r"(\d{4})\s*г")
MILEAGE_RE = re.compile(r"([\d\s.]+)\s*км")
FUEL_RE = re.compile(r"(дизелов|бензинов|газ)")
HORSEPOWER_RE = re.compile(r"([\d\s.]+)\s*к\.с\.?")
ENGINE_VOLUME_RE = re.compile(r"([\d\s.]+)\s*куб\.см")
TRANSMISSION_RE = re.compile(r"(автоматична|ръчна)")
BODY_STYLE_RE = re.compile(r"(седан|комби|купе|хечбек|джип)")


def _block_text(rx, markup: str) -> Optional[str]:
    m = rx.search(markup)
    return strip_tags(m.group(1)) if m else None


def _group(rx, text: str) -> str:
    m = rx.search(text)
    return m.group(1) if m else ""


def extract_title(markup: str) -> str:
    title = _block_text(TITLE_ANCHOR_RE, markup)
    if title is None:
        title = _block_text(TITLE_DIV_RE, markup)
    return clean_text(title)


def extract_price(markup: str) -> str:
    """Price in leva as a digit string."""
    price_text = _block_text(PRICE_DIV_RE, markup)
    if price_text is None:
        return ""
    bgn = BGN_PRICE_RE.search(price_text)
    price = bgn.group(1).strip() if bgn else price_text.strip()
    return only_digits(price)


def params_text(markup: str) -> str:
    return (_block_text(PARAMS_DIV_RE, markup) or "").lower()


def extract_fields(markup: str, link: str) -> ListingRecord:
    """
    Build a record from a listing's original-case markup.

    The matched keyword is not known here; callers set it.
    """
    params = params_text(markup)

    return ListingRecord(
        link=link,
        title=extract_title(markup),
        price=extract_price(markup),
        year=only_digits(_group(YEAR_RE, params))[:4],
        mileage=only_digits(_group(MILEAGE_RE, params)),
        fuel=clean_text(_group(FUEL_RE, params)),
        engine_volume=only_digits(_group(ENGINE_VOLUME_RE, params)),
        horsepower=only_digits(_group(HORSEPOWER_RE, params)),
        transmission=clean_text(_group(TRANSMISSION_RE, params)),
        body_style=clean_text(_group(BODY_STYLE_RE, params)),
    )
