"""
SQLite record store with price history, keyed by listing link.
"""
import sqlite3
from typing import Dict, Optional, Tuple

import pandas as pd

from .models import ListingRecord
from .utils import now_iso


RECORD_COLUMNS = (
    "title", "price", "year", "mileage", "fuel", "engine_volume",
    "horsepower", "transmission", "body_style", "matched_keyword",
)

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS listings (
  link TEXT PRIMARY KEY,
  {', '.join(f'{c} TEXT' for c in RECORD_COLUMNS)},
  first_seen TEXT,
  last_seen TEXT
);
CREATE TABLE IF NOT EXISTS price_history (
  link TEXT REFERENCES listings(link),
  ts TEXT,
  price TEXT,
  PRIMARY KEY (link, ts)
);
CREATE INDEX IF NOT EXISTS ix_listings_first_seen ON listings(first_seen);
CREATE INDEX IF NOT EXISTS ix_price_history_link ON price_history(link);
"""


def db_connect(path: str) -> sqlite3.Connection:
    """
    Open the store at `path` (":memory:" works too) with its schema in place.
    File-backed stores run in WAL mode so a report can read during a run.
    """
    conn = sqlite3.connect(path)
    if path != ":memory:":
        conn.execute("PRAGMA journal_mode=WAL;")
    db_init(conn)
    return conn


def db_init(conn: sqlite3.Connection):
    conn.executescript(SCHEMA)


def db_get_listing(conn: sqlite3.Connection, link: str) -> Optional[Dict]:
    """Stored columns of one listing, or None when the link is unknown."""
    cur = conn.cursor()
    cur.row_factory = sqlite3.Row
    row = cur.execute("SELECT * FROM listings WHERE link = ?", (link,)).fetchone()
    return dict(row) if row is not None else None


def db_insert_listing(conn: sqlite3.Connection, rec: ListingRecord, ts: str):
    cols = ("link",) + RECORD_COLUMNS + ("first_seen", "last_seen")
    values = [rec.link] + [getattr(rec, c) for c in RECORD_COLUMNS] + [ts, ts]
    conn.execute(
        f"INSERT INTO listings ({','.join(cols)}) VALUES ({','.join('?' * len(cols))})",
        values,
    )
    conn.commit()


def db_update_listing(conn: sqlite3.Connection, rec: ListingRecord, ts: str):
    assignments = ", ".join(f"{c}=?" for c in RECORD_COLUMNS)
    values = [getattr(rec, c) for c in RECORD_COLUMNS] + [ts, rec.link]
    conn.execute(f"UPDATE listings SET {assignments}, last_seen=? WHERE link=?", values)
    conn.commit()


def db_insert_price_event(conn: sqlite3.Connection, link: str, price: str, ts: str):
    """Insert price change event into price history."""
    if not price:
        return
    conn.execute(
        "INSERT OR REPLACE INTO price_history (link, ts, price) VALUES (?, ?, ?)",
        (link, ts, price),
    )
    conn.commit()


def upsert_with_price_history(conn: sqlite3.Connection, rec: ListingRecord) -> Tuple[bool, bool]:
    """
    Insert or update a listing and track price changes.

    Returns:
        Tuple of (is_new_item, price_changed)
    """
    ts = now_iso()
    existing = db_get_listing(conn, rec.link)
    if existing is None:
        db_insert_listing(conn, rec, ts)
        db_insert_price_event(conn, rec.link, rec.price, ts)
        return True, bool(rec.price)

    price_changed = bool(rec.price) and rec.price != (existing.get("price") or "")
    db_update_listing(conn, rec, ts)
    if price_changed:
        db_insert_price_event(conn, rec.link, rec.price, ts)
    return False, price_changed


def export_new_since_run(conn: sqlite3.Connection, run_started_iso: str) -> pd.DataFrame:
    """Export listings that were first seen since the given timestamp."""
    q = """
    SELECT *
    FROM listings
    WHERE first_seen >= ?
    ORDER BY first_seen DESC
    """
    return pd.read_sql_query(q, conn, params=(run_started_iso,))


def export_price_history(conn: sqlite3.Connection, link: Optional[str] = None) -> pd.DataFrame:
    """Export price history for all listings or one link."""
    if link:
        q = "SELECT * FROM price_history WHERE link=? ORDER BY ts ASC"
        return pd.read_sql_query(q, conn, params=(link,))
    q = "SELECT * FROM price_history ORDER BY link, ts ASC"
    return pd.read_sql_query(q, conn)
