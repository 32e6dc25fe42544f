"""
Command line entry point: scrape first-owner listings from mobile.bg.
"""
import argparse
import asyncio
import os
import sys
from typing import List, Optional

from .config import ScrapeConfig
from .core import deduplicate, scrape
from .database import db_connect, export_new_since_run, export_price_history, upsert_with_price_history
from .exceptions import ScraperError
from .export import default_output_name, save_output_rows
from .models import FETCH_FAILED
from .report import render_report
from .utils import init_logger, now_iso


def parse_args(argv: Optional[List[str]] = None):
    env = ScrapeConfig.from_env()
    ap = argparse.ArgumentParser(description="mobile.bg first-owner car scraper with pipe-delimited export")
    ap.add_argument("--start-url", default=env.start_url, help="First results page to scrape")
    ap.add_argument("--max-pages", type=int, default=env.max_pages, help="Page limit (0 = unlimited)")
    ap.add_argument("--delay-ms", type=int, default=env.delay_ms, help="Delay between page requests in ms")
    ap.add_argument("--keyword", action="append", default=None,
                    help="First-owner keyword; repeat for several (default: първи, първият, първия, история)")
    ap.add_argument("--import-phrase", default=env.import_phrase, help="Skip listings whose description contains this")
    ap.add_argument("--timeout-ms", type=int, default=env.timeout_ms, help="Per-request timeout in ms")
    ap.add_argument("--out", type=str, default="", help="Record file path (default: first-owner-cars-<timestamp>.csv)")
    ap.add_argument("--db", type=str, default="", help="Also upsert records into this SQLite DB")
    ap.add_argument("--export-new", type=str, default="",
                    help="With --db: write listings first seen in this run to this CSV/XLSX")
    ap.add_argument("--export-prices", type=str, default="",
                    help="With --db: write price_history to this CSV/XLSX")
    ap.add_argument("--report", action="store_true", help="Render an HTML report next to the record file")
    # Logging
    lvl_choices = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    ap.add_argument("--log-level", choices=lvl_choices, default=None,
                    help="Global log level for both console and file (overrides --log-console/--log-file).")
    ap.add_argument("--log-console", choices=lvl_choices, default=os.getenv("LOG_CONSOLE", "INFO"),
                    help="Console log level (default from env LOG_CONSOLE or INFO).")
    ap.add_argument("--log-file", choices=lvl_choices, default=os.getenv("LOG_FILE", "DEBUG"),
                    help="File log level (default from env LOG_FILE or DEBUG).")
    ap.add_argument("--log-file-path", default=os.getenv("LOG_FILE_PATH", "mobilebg.log"),
                    help="Path to log file (default from env LOG_FILE_PATH or mobilebg.log).")
    ap.add_argument("--no-file-log", action="store_true",
                    help="Disable file logging (only console output).")

    args = ap.parse_args(argv)
    args.config = ScrapeConfig(
        start_url=args.start_url,
        max_pages=args.max_pages,
        delay_ms=args.delay_ms,
        keywords=args.keyword or env.keywords,
        import_phrase=args.import_phrase,
        encoding=env.encoding,
        timeout_ms=args.timeout_ms,
        user_agent=env.user_agent,
    )
    return args


def _write_frame(df, path: str):
    if path.lower().endswith(".xlsx"):
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)


def store_records(db_path: str, records, run_started_iso: str, args, logger):
    os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
    conn = db_connect(db_path)
    try:
        new_items = 0
        price_changed_count = 0
        for rec in records:
            is_new, price_changed = upsert_with_price_history(conn, rec)
            if is_new:
                new_items += 1
            if price_changed:
                price_changed_count += 1
        logger.info(f">>> In DB: new items added: {new_items}, price changes: {price_changed_count}")

        if args.export_new:
            dfn = export_new_since_run(conn, run_started_iso)
            _write_frame(dfn, args.export_new)
            logger.info(f">>> Export only new items: {len(dfn)} rows -> {args.export_new}")
        if args.export_prices:
            dfp = export_price_history(conn)
            _write_frame(dfp, args.export_prices)
            logger.info(f">>> Export price_history: {len(dfp)} rows -> {args.export_prices}")
    finally:
        conn.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    eff_console = args.log_level or args.log_console
    eff_file = args.log_level or args.log_file
    logger = init_logger(
        console_level=eff_console,
        file_level=eff_file,
        log_file=None if args.no_file_log else args.log_file_path
    )
    logger.info(
        f"Logger initialized: console={eff_console}, "
        f"file={'DISABLED' if args.no_file_log else eff_file}, "
        f"path={'N/A' if args.no_file_log else args.log_file_path}"
    )
    run_started_iso = now_iso()
    logger.info(f">>> Run started at {run_started_iso}")

    try:
        state = asyncio.run(scrape(args.config, logger))
        result = deduplicate(state.records, logger)

        out_path = save_output_rows(result, args.out or default_output_name(), logger)
        if args.db:
            store_records(args.db, result, run_started_iso, args, logger)
        if args.report:
            logger.info(f"Generated HTML: {render_report(out_path)}")
    except (ScraperError, OSError) as e:
        logger.error(f"Run failed: {e}")
        return 1

    return 1 if state.status == FETCH_FAILED else 0


if __name__ == "__main__":
    sys.exit(main())
