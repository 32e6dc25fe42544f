"""
Inclusion rules for listing containers.
"""
from dataclasses import dataclass
from typing import Sequence

from .markup import Container


SELLER_MARKER = "seller"
PAID_PLACEMENT_MARKERS = ('class="item top', 'class="item vip')
DEFAULT_IMPORT_PHRASE = "нов внос"


@dataclass(frozen=True)
class Classification:
    included: bool
    matched_keyword: str = ""
    reason: str = ""


def has_seller(container: Container) -> bool:
    """Dealer/broker listings carry a seller block."""
    return container.has_descendant(SELLER_MARKER)


def is_top_or_vip(container: Container) -> bool:
    raw = container.raw_markup
    return any(marker in raw for marker in PAID_PLACEMENT_MARKERS)


def find_matching_keyword(text: str, keywords: Sequence[str]) -> str:
    """First keyword contained in `text` (case-insensitive), or ""."""
    text_lower = (text or "").lower()
    for keyword in keywords:
        if keyword and keyword.lower() in text_lower:
            return keyword
    return ""


def classify(
    container: Container,
    keywords: Sequence[str],
    import_phrase: str = DEFAULT_IMPORT_PHRASE
) -> Classification:
    """
    Decide whether a listing is kept.

    Checks run in order and the first exclusion wins: seller block,
    top/vip placement, import phrase in the description, then keywords.
    """
    if has_seller(container):
        return Classification(False, reason="seller")

    if is_top_or_vip(container):
        return Classification(False, reason="top_or_vip")

    description = container.text
    if import_phrase and import_phrase.lower() in description:
        return Classification(False, reason="import")

    keyword = find_matching_keyword(description, keywords)
    if not keyword:
        return Classification(False, reason="no_keyword")
    return Classification(True, matched_keyword=keyword)
