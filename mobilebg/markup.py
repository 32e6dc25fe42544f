"""
Regex-backed pseudo-DOM over raw results-page markup.

Results pages are never parsed into a tree. Listing anchors and the paging
link are located with patterns, and a listing's container is resolved by
walking back to the nearest item div and counting nested div tags forward
until the matching close tag. Everything that knows about tag syntax lives in
this module; the classifier and extractor only see `Container` objects.
"""
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .models import AnchorMatch
from .utils import strip_tags


LISTING_ANCHOR_RE = re.compile(r'<a[^>]+href="([^"]*obiava-[^"]*)"[^>]*>', re.I)
ITEM_DIV_RE = re.compile(r'<div[^>]+class="[^"]*item[^"]*"[^>]*>', re.I)
DESCRIPTION_SECTION = "info"


def find_closing_boundary(markup: str, start: int, tag: str = "div") -> Optional[int]:
    """
    Find the end of the element whose opening tag starts at `start`.

    Counts every "<tag" as an opening and every exact "</tag>" as a closing,
    starting at depth 1 just after the opening tag name. Returns the offset
    right after the closing tag that brings depth to 0, or None when the
    markup runs out first.

    Purely textual: case-sensitive, blind to comments and self-closing tags,
    and "<divider" counts as an opening "<div".
    """
    opening = "<" + tag
    closing = "</" + tag + ">"
    depth = 1
    i = start + len(opening)

    while i < len(markup):
        close_at = markup.find(closing, i)
        if close_at == -1:
            return None
        open_at = markup.find(opening, i)
        if open_at != -1 and open_at < close_at:
            depth += 1
            i = open_at + len(opening)
            continue
        depth -= 1
        if depth == 0:
            return close_at + len(closing)
        i = close_at + len(closing)

    return None


@dataclass(frozen=True)
class Container:
    """Markup span of one listing on a results page."""

    start: int
    end: int
    markup: str

    @property
    def raw_markup(self) -> str:
        """Lower-cased markup, used for placement checks."""
        return self.markup.lower()

    @property
    def text(self) -> str:
        """Lower-cased description text."""
        return self.text_of(DESCRIPTION_SECTION).lower()

    def has_descendant(self, selector: str) -> bool:
        # Substring test, not tree containment
        return f'class="{selector}"' in self.markup

    def has_class(self, name: str) -> bool:
        return 'class="' in self.markup and name in self.markup

    def text_of(self, section: str) -> str:
        """
        Text of the `<div class="section">` block.

        The block ends at the next div or span opening, or at the end of
        the container, whichever comes first.
        """
        rx = re.compile(
            r'<div[^>]+class="%s"[^>]*>(.*?)(?=<div|<span|\Z)' % re.escape(section),
            re.I | re.S,
        )
        m = rx.search(self.markup)
        if not m:
            return ""
        return strip_tags(m.group(1))


NextPageMatcher = Callable[[str], Optional[AnchorMatch]]


def regex_matcher(pattern: str) -> NextPageMatcher:
    """Build a paging-link matcher from a pattern whose group 1 is the href."""
    rx = re.compile(pattern, re.I)

    def match(markup: str) -> Optional[AnchorMatch]:
        m = rx.search(markup)
        if not m:
            return None
        return AnchorMatch(href=m.group(1), offset=m.start())

    match.pattern = rx.pattern
    return match


# Tried in order, first hit wins
NEXT_PAGE_MATCHERS: List[NextPageMatcher] = [
    regex_matcher(r'<a[^>]+class="[^"]*next[^"]*"[^>]+href="([^"]*)"[^>]*>'),
    regex_matcher(r'<a[^>]+href="([^"]*)"[^>]+class="[^"]*next[^"]*"[^>]*>'),
    regex_matcher(r'<a[^>]+class="[^"]*saveSlink[^"]*next[^"]*"[^>]+href="([^"]*)"[^>]*>'),
    regex_matcher(r'<a[^>]+href="([^"]*)"[^>]*><span>Напред</span></a>'),
    regex_matcher(r'<a[^>]+href="([^"]*)"[^>]*class="[^"]*next[^"]*"[^>]*><span>Напред</span></a>'),
]


class PseudoDocument:
    """Query facade over one decoded results page."""

    def __init__(self, markup: str):
        self.markup = markup or ""

    def find_all_anchors(self, pattern: re.Pattern = LISTING_ANCHOR_RE) -> List[AnchorMatch]:
        """All listing anchors in document order."""
        return [
            AnchorMatch(href=m.group(1), offset=m.start())
            for m in pattern.finditer(self.markup)
            if m.group(1)
        ]

    def find_first(self, matchers: Sequence[NextPageMatcher] = NEXT_PAGE_MATCHERS) -> Optional[AnchorMatch]:
        """Return the first hit of the ordered matchers, or None."""
        for matcher in matchers:
            found = matcher(self.markup)
            if found is not None:
                return found
        return None

    def resolve_ancestor_container(self, anchor: AnchorMatch) -> Optional[Container]:
        """Resolve the item div enclosing `anchor`, or None if it cannot be found."""
        last = None
        for m in ITEM_DIV_RE.finditer(self.markup, 0, anchor.offset):
            last = m
        if last is None:
            return None

        start = last.start()
        end = find_closing_boundary(self.markup, start, "div")
        if end is None:
            return None
        return Container(start=start, end=end, markup=self.markup[start:end])
