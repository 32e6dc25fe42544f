"""
Record file export for the mobile.bg scraper.
"""
import csv
import os
import re
from datetime import datetime, timezone
from typing import Iterable, List

import pandas as pd

from .models import ListingRecord
from .utils import get_logger


DELIMITER = "|"
UNSAFE_CHARS_RE = re.compile(r"[|\r\n]")

# Column order of the record file; the report generator matches on these names
RECORD_HEADERS: List[str] = [
    "Линк",
    "Заглавие",
    "Цена",
    "Година на производство",
    "Пробег",
    "Тип гориво",
    "Обем на двигателя",
    "Мощност",
    "Скоростна кутия",
    "Форм фактор",
    "Намерен по ключова дума",
]


def default_output_name() -> str:
    """first-owner-cars-<timestamp>.csv with a filesystem-safe timestamp."""
    stamp = datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")
    return f"first-owner-cars-{stamp}.csv"


def escape_value(value) -> str:
    """Replace delimiter and line-break characters with spaces and trim."""
    if value is None:
        return ""
    return UNSAFE_CHARS_RE.sub(" ", str(value)).strip()


def records_to_frame(records: Iterable[ListingRecord]) -> pd.DataFrame:
    rows = [[escape_value(v) for v in r.as_row()] for r in records]
    return pd.DataFrame(rows, columns=RECORD_HEADERS, dtype=str)


def save_output_rows(records: Iterable[ListingRecord], out_path: str, logger=None) -> str:
    """Save records to a pipe-delimited file and return its path."""
    df = records_to_frame(records)
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    # values are written raw; escape_value already removed anything that would need quoting
    df.to_csv(
        out_path, sep=DELIMITER, index=False, encoding="utf-8",
        lineterminator="\n", quoting=csv.QUOTE_NONE,
    )

    get_logger(logger).info(f">>> Saved {len(df)} rows to {out_path}")
    return out_path
