"""
mobile.bg First-Owner Listing Scraper Package
"""
from .models import ListingRecord, AnchorMatch, TraversalState, ResultSet
from .config import ScrapeConfig
from .markup import PseudoDocument, Container, find_closing_boundary
from .classify import classify
from .extract import extract_fields
from .core import run_scrape, scrape, advance, deduplicate
from .export import save_output_rows, RECORD_HEADERS
from .exceptions import ScraperError, FetchError, ConfigError, ReportError
from .utils import init_logger, now_iso

__version__ = "1.0.0"

__all__ = [
    "ListingRecord",
    "AnchorMatch",
    "TraversalState",
    "ResultSet",
    "ScrapeConfig",
    "PseudoDocument",
    "Container",
    "find_closing_boundary",
    "classify",
    "extract_fields",
    "run_scrape",
    "scrape",
    "advance",
    "deduplicate",
    "save_output_rows",
    "RECORD_HEADERS",
    "ScraperError",
    "FetchError",
    "ConfigError",
    "ReportError",
    "init_logger",
    "now_iso"
]
