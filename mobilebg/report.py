"""
HTML report over a pipe-delimited record file.

Columns are located by header name, so files written with the Bulgarian
headers or with English names render the same way.
"""
import argparse
import csv
import html
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .exceptions import ReportError
from .utils import init_logger, only_digits


# Role -> accepted header names (lower-case). First match wins.
COLUMN_SYNONYMS: Dict[str, List[str]] = {
    "link": ["линк", "link"],
    "title": ["заглавие", "title"],
    "price": ["цена", "price"],
    "year": ["година на производство", "година", "year"],
    "mileage": ["пробег", "mileage"],
    "fuel": ["тип гориво", "fuel"],
    "engine_volume": ["обем на двигателя", "engine volume", "engine"],
    "horsepower": ["мощност", "horsepower"],
    "transmission": ["скоростна кутия", "transmission"],
    "body_style": ["форм фактор", "form"],
    "matched_keyword": ["намерен по ключова дума", "matched keyword"],
}

DEFAULT_HEADER_LABELS: Dict[str, str] = {
    "link": "Линк",
    "title": "Заглавие",
    "price": "Цена",
    "year": "Година на производство",
    "mileage": "Пробег",
    "fuel": "Тип гориво",
    "engine_volume": "Обем на двигателя",
    "horsepower": "Мощност",
    "transmission": "Скоростна кутия",
    "body_style": "Форм фактор",
    "matched_keyword": "Намерен по ключова дума",
}

NUMERIC_ROLES = {"price", "year", "mileage", "engine_volume", "horsepower"}

# Price is the only optional column
COLUMN_ORDER = [
    "link", "title", "price", "year", "mileage", "fuel", "engine_volume",
    "horsepower", "transmission", "body_style", "matched_keyword",
]


def find_csv_file(arg: Optional[str] = None, cwd: str = ".") -> Path:
    """The given file if it exists, else the newest *.csv in `cwd`."""
    if arg and Path(arg).is_file():
        return Path(arg)

    files = sorted(Path(cwd).glob("*.csv"), key=lambda p: p.stat().st_mtime, reverse=True)
    if not files:
        raise ReportError(f"No .csv files found in {Path(cwd).resolve()}. Pass a path as the first argument.")
    return files[0]


def load_table(path) -> Tuple[List[str], List[List[str]]]:
    """Read a pipe-delimited file into trimmed headers and rows."""
    try:
        df = pd.read_csv(
            path, sep="|", dtype=str, keep_default_na=False,
            skip_blank_lines=True, encoding="utf-8", quoting=csv.QUOTE_NONE,
        )
    except pd.errors.EmptyDataError:
        return [], []
    except (OSError, pd.errors.ParserError) as e:
        raise ReportError(f"Cannot read {path}: {e}") from e

    headers = [str(h).strip() for h in df.columns]
    rows = [[str(v).strip() for v in row] for row in df.itertuples(index=False, name=None)]
    return headers, rows


def infer_column_index(headers: Sequence[str], candidates: Sequence[str]) -> int:
    lc = [h.strip().lower() for h in headers]
    for c in candidates:
        if c in lc:
            return lc.index(c)
    return -1


def infer_columns(headers: Sequence[str]) -> Dict[str, int]:
    """Column index per role, -1 where a role has no column."""
    return {role: infer_column_index(headers, names) for role, names in COLUMN_SYNONYMS.items()}


def _cell(row: Sequence[str], idx: int) -> str:
    return row[idx] if 0 <= idx < len(row) else ""


def _header_cell(label: str, key: str) -> str:
    return f'<th data-key="{key}">{html.escape(label)}<span class="sort-indicator"></span></th>'


def _row_html(row: Sequence[str], columns: Dict[str, int], roles: List[str]) -> str:
    parts = ["<tr>"]
    for role in roles:
        value = _cell(row, columns[role])
        if role == "title":
            link = _cell(row, columns["link"])
            parts.append(
                f'<td><a href="{html.escape(link)}" target="_blank" rel="noopener">'
                f'{html.escape(value or link)}</a></td>'
            )
        elif role in NUMERIC_ROLES:
            num = only_digits(value)
            data = f' data-num="{num}"' if num else ""
            parts.append(f'<td class="numeric"{data}>{html.escape(value)}</td>')
        else:
            parts.append(f"<td>{html.escape(value)}</td>")
    parts.append("</tr>")
    return "".join(parts)


def build_html(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Render a sortable, searchable table page."""
    columns = infer_columns(headers)
    roles = [r for r in COLUMN_ORDER if r != "price" or columns["price"] != -1]

    head = []
    for role in roles:
        idx = columns[role]
        label = headers[idx] if idx != -1 else DEFAULT_HEADER_LABELS[role]
        head.append(_header_cell(label, role))

    hint = "Кликни заглавията за сортиране (вкл. Пробег, Мощност, "
    if columns["price"] != -1:
        hint += "Цена, "
    hint += "Година, Ключова дума)"

    body = "\n".join(_row_html(r, columns, roles) for r in rows)
    return (
        REPORT_HTML
        .replace("{{hint}}", html.escape(hint))
        .replace("{{head}}", "".join(head))
        .replace("{{body}}", body)
    )


def render_report(csv_path) -> Path:
    """Write <name>.html next to the record file and return its path."""
    csv_path = Path(csv_path)
    headers, rows = load_table(csv_path)
    out = csv_path.with_suffix(".html")
    out.write_text(build_html(headers, rows), encoding="utf-8")
    return out


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Render a pipe-delimited record file as an HTML table")
    ap.add_argument("csv_path", nargs="?", default=None,
                    help="Record file (default: newest .csv in the current directory)")
    args = ap.parse_args(argv)

    logger = init_logger(log_file=None)
    try:
        out = render_report(find_csv_file(args.csv_path))
    except (ReportError, OSError) as e:
        logger.error(str(e))
        return 1
    logger.info(f"Generated HTML: {out}")
    return 0


REPORT_HTML = '''<!doctype html>
<html lang="bg">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Обобщена таблица от CSV</title>
  <style>
    body { font-family: system-ui, -apple-system, Segoe UI, Roboto, Ubuntu, sans-serif; margin: 24px; }
    table { width: 100%; border-collapse: collapse; }
    th, td { padding: 10px 12px; border-bottom: 1px solid #e5e7eb; text-align: left; }
    th { background: #f8fafc; position: sticky; top: 0; z-index: 1; cursor: pointer; user-select: none; }
    tr:hover { background: #f9fafb; }
    a { color: #2563eb; text-decoration: none; }
    a:hover { text-decoration: underline; }
    .sort-indicator { margin-left: 6px; color: #94a3b8; }
    .numeric { text-align: right; white-space: nowrap; }
    .toolbar { display: flex; gap: 12px; align-items: center; margin-bottom: 12px; }
    input[type="search"] { padding: 8px 10px; border: 1px solid #cbd5e1; border-radius: 6px; width: 280px; }
    .muted { color: #64748b; font-size: 12px; }
  </style>
</head>
<body>
  <div class="toolbar">
    <input id="search" type="search" placeholder="Търси по заглавие или ключова дума..." />
    <span class="muted">{{hint}}</span>
  </div>
  <table id="data-table">
    <thead><tr>{{head}}</tr></thead>
    <tbody>
{{body}}
    </tbody>
  </table>
  <script>
  (function() {
    const table = document.getElementById('data-table');
    const tbody = table.querySelector('tbody');
    const headers = Array.from(table.querySelectorAll('th'));
    const numericKeys = new Set(['mileage', 'horsepower', 'price', 'year', 'engine_volume']);
    let sortState = { key: null, dir: 1 };

    function cellValue(row, idx, key) {
      const cell = row.children[idx];
      if (!cell) return '';
      if (cell.dataset.num) return parseFloat(cell.dataset.num);
      const text = (cell.textContent || '').trim();
      if (numericKeys.has(key)) return Number.NEGATIVE_INFINITY;
      return text.toLowerCase();
    }

    headers.forEach((h, idx) => {
      h.addEventListener('click', () => {
        const key = h.dataset.key;
        const dir = (sortState.key === key) ? -sortState.dir : 1;
        sortState = { key, dir };
        const rows = Array.from(tbody.querySelectorAll('tr'));
        rows.sort((a, b) => {
          const va = cellValue(a, idx, key);
          const vb = cellValue(b, idx, key);
          if (va < vb) return -dir;
          if (va > vb) return dir;
          return 0;
        });
        rows.forEach(r => tbody.appendChild(r));
        headers.forEach(o => {
          const span = o.querySelector('.sort-indicator');
          if (span) span.textContent = (o === h) ? (dir > 0 ? '▲' : '▼') : '';
        });
      });
    });

    const search = document.getElementById('search');
    search.addEventListener('input', () => {
      const q = search.value.trim().toLowerCase();
      tbody.querySelectorAll('tr').forEach(r => {
        const tds = r.querySelectorAll('td');
        const title = (tds[1] ? tds[1].textContent : '').toLowerCase();
        const keyword = (tds[tds.length - 1] ? tds[tds.length - 1].textContent : '').toLowerCase();
        r.style.display = (!q || title.includes(q) || keyword.includes(q)) ? '' : 'none';
      });
    });
  })();
  </script>
</body>
</html>'''


if __name__ == "__main__":
    sys.exit(main())
