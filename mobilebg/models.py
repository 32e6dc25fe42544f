"""
Data models for the mobile.bg scraper.
"""
from dataclasses import dataclass, field, fields, replace
from typing import List, Tuple


# Traversal status values
RUNNING = "running"
NO_MORE_PAGES = "no_more_pages"
LIMIT_REACHED = "limit_reached"
FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class AnchorMatch:
    """A candidate link occurrence inside a raw results page."""

    href: str
    offset: int


@dataclass
class ListingRecord:
    """One first-owner listing extracted from a results page."""

    link: str
    title: str = ""
    price: str = ""
    year: str = ""
    mileage: str = ""
    fuel: str = ""
    engine_volume: str = ""
    horsepower: str = ""
    transmission: str = ""
    body_style: str = ""
    matched_keyword: str = ""

    NUMERIC_FIELDS = ("price", "year", "mileage", "engine_volume", "horsepower")

    def as_row(self) -> List[str]:
        """Field values in record file column order."""
        return [getattr(self, f.name) for f in fields(self)]


@dataclass(frozen=True)
class TraversalState:
    """
    Snapshot of the pagination walk.

    Every transition returns a new instance; `records` only ever grows.
    """

    page: int
    url: str
    records: Tuple[ListingRecord, ...] = ()
    status: str = RUNNING

    @property
    def done(self) -> bool:
        return self.status != RUNNING

    def with_records(self, new_records: List[ListingRecord]) -> "TraversalState":
        return replace(self, records=self.records + tuple(new_records))

    def stop(self, status: str) -> "TraversalState":
        return replace(self, status=status)

    def move_to(self, url: str) -> "TraversalState":
        return replace(self, page=self.page + 1, url=url)


@dataclass
class ResultSet:
    """Deduplicated records in first-seen order."""

    records: List[ListingRecord] = field(default_factory=list)
    duplicates: int = 0

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)
