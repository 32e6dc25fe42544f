"""
Pagination traversal and deduplication.

The walk is a sequence of immutable `TraversalState` values. `advance` turns
one fetched page into the next state; `run_scrape` drives it, awaiting only
on page fetches and the inter-page delay.
"""
import asyncio
import logging
import re
from typing import Iterable, List, Optional

from .classify import classify
from .config import ScrapeConfig
from .exceptions import FetchError
from .extract import extract_fields
from .fetch import PageFetcher
from .markup import PseudoDocument
from .models import (
    FETCH_FAILED,
    LIMIT_REACHED,
    NO_MORE_PAGES,
    ListingRecord,
    ResultSet,
    TraversalState,
)
from .utils import absolutize, get_logger


PAGE_FRAGMENT_RE = re.compile(r"p-\d+")

STOP_MESSAGES = {
    NO_MORE_PAGES: "No next page found. Stopping.",
    LIMIT_REACHED: "Page limit reached. Stopping.",
    FETCH_FAILED: "Failed to fetch page. Stopping.",
}


def extract_page(
    document: PseudoDocument,
    page_url: str,
    config: ScrapeConfig,
    logger: Optional[logging.Logger] = None
) -> List[ListingRecord]:
    """Records for every included listing on one results page, in page order."""
    logger = get_logger(logger)
    anchors = document.find_all_anchors()
    logger.info(f">>> Found {len(anchors)} car links on this page")

    records: List[ListingRecord] = []
    for anchor in anchors:
        href = anchor.href
        if "obiava-" not in href or "-" not in href:
            continue

        container = document.resolve_ancestor_container(anchor)
        if container is None:
            logger.debug(f"No listing container for {href}")
            continue

        verdict = classify(container, config.keywords, config.import_phrase)
        if not verdict.included:
            logger.debug(f"Skipping {href}: {verdict.reason}")
            continue

        link = absolutize(href, page_url)
        record = extract_fields(container.markup, link)
        record.matched_keyword = verdict.matched_keyword
        records.append(record)
        logger.info(f"Found first-owner car: {link} ({verdict.matched_keyword})")

    return records


def fallback_page_url(start_url: str, page: int) -> str:
    """Start URL with any p-N fragment replaced by the given page index."""
    base = PAGE_FRAGMENT_RE.sub("", start_url, count=1)
    sep = "&" if "?" in base else "?"
    return f"{base}{sep}p-{page}"


def next_page_url(
    document: PseudoDocument,
    current_url: str,
    next_page: int,
    start_url: str
) -> Optional[str]:
    """
    URL of the following results page, or None without a paging link.

    An empty href on the paging link falls back to a constructed URL.
    """
    anchor = document.find_first()
    if anchor is None:
        return None
    if anchor.href.strip():
        return absolutize(anchor.href, current_url)
    return fallback_page_url(start_url, next_page)


def advance(
    state: TraversalState,
    document: PseudoDocument,
    config: ScrapeConfig,
    logger: Optional[logging.Logger] = None
) -> TraversalState:
    """Process the page fetched for `state` and return the next state."""
    logger = get_logger(logger)
    page_records = extract_page(document, state.url, config, logger)
    state = state.with_records(page_records)
    logger.info(f">>> Page {state.page}: found {len(page_records)} first-owner cars")
    logger.info(f">>> Total cars found so far: {len(state.records)}")

    next_page = state.page + 1
    next_url = next_page_url(document, state.url, next_page, config.start_url)
    if not next_url or next_url == state.url:
        return state.stop(NO_MORE_PAGES)

    if config.max_pages and next_page > config.max_pages:
        return state.stop(LIMIT_REACHED)

    logger.info(f">>> Moving to page {next_page}: {next_url}")
    return state.move_to(next_url)


async def run_scrape(config: ScrapeConfig, fetcher, logger: Optional[logging.Logger] = None) -> TraversalState:
    """
    Walk result pages from `config.start_url` until a terminal state.

    `fetcher` is anything with an async `fetch(url) -> str` that raises
    FetchError on failure. A failed fetch ends the walk; records gathered
    so far stay in the returned state.
    """
    logger = get_logger(logger)
    config.validate()

    logger.info(f">>> Target URL: {config.start_url}")
    logger.info(f">>> Looking for keywords: {', '.join(config.keywords)}")
    logger.info(f">>> Page limit: {config.max_pages or 'unlimited'}")
    logger.info(f">>> Request delay: {config.delay_ms}ms")

    state = TraversalState(page=1, url=config.start_url)
    while not state.done:
        logger.info(f"--- Processing page {state.page} ---")
        try:
            html = await fetcher.fetch(state.url)
        except FetchError as e:
            logger.error(f"Error fetching page {state.page}: {e}")
            state = state.stop(FETCH_FAILED)
            break

        next_state = advance(state, PseudoDocument(html), config, logger)
        if not next_state.done and config.delay_ms > 0:
            await asyncio.sleep(config.delay_ms / 1000)
        state = next_state

    logger.info(STOP_MESSAGES.get(state.status, state.status))
    return state


async def scrape(config: ScrapeConfig, logger: Optional[logging.Logger] = None) -> TraversalState:
    """Run the traversal with a live PageFetcher."""
    async with PageFetcher(
        encoding=config.encoding,
        timeout_ms=config.timeout_ms,
        user_agent=config.user_agent,
        logger=logger,
    ) as fetcher:
        return await run_scrape(config, fetcher, logger)


def deduplicate(records: Iterable[ListingRecord], logger: Optional[logging.Logger] = None) -> ResultSet:
    """Keep the first record seen for each link."""
    seen = set()
    result = ResultSet()
    for record in records:
        if record.link in seen:
            result.duplicates += 1
            continue
        seen.add(record.link)
        result.records.append(record)

    get_logger(logger).info(
        f">>> Total first-owner cars found: {len(result)} ({result.duplicates} duplicates removed)"
    )
    return result
