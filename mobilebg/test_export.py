"""
Tests for the record file, the SQLite store and the HTML report.
"""
import os

import pytest

from mobilebg.database import (
    db_connect,
    db_get_listing,
    export_new_since_run,
    export_price_history,
    upsert_with_price_history,
)
from mobilebg.exceptions import ReportError
from mobilebg.export import RECORD_HEADERS, default_output_name, escape_value, save_output_rows
from mobilebg.models import ListingRecord
from mobilebg.report import (
    COLUMN_SYNONYMS,
    build_html,
    find_csv_file,
    infer_column_index,
    infer_columns,
    load_table,
    render_report,
)


def sample_records():
    return [
        ListingRecord(
            link="https://www.mobile.bg/obiava-1-bmw-320", title="BMW 320 | d", price="12500",
            year="2012", mileage="120000", fuel="дизелов", engine_volume="1900", horsepower="150",
            transmission="автоматична", body_style="седан", matched_keyword="история",
        ),
        ListingRecord(link="https://www.mobile.bg/obiava-2-audi-a4", title='Audi A4 "Avant"', matched_keyword="първи"),
    ]


def test_record_file_layout(tmp_path):
    out = save_output_rows(sample_records(), str(tmp_path / "out" / "cars.csv"))
    lines = open(out, encoding="utf-8").read().splitlines()

    assert lines[0] == "|".join(RECORD_HEADERS)
    assert lines[1] == (
        "https://www.mobile.bg/obiava-1-bmw-320|BMW 320   d|12500|2012|120000|дизелов|1900|150"
        "|автоматична|седан|история"
    )
    assert lines[2] == 'https://www.mobile.bg/obiava-2-audi-a4|Audi A4 "Avant"|||||||||първи'
    assert len(lines) == 3


def test_empty_record_file(tmp_path):
    out = save_output_rows([], str(tmp_path / "empty.csv"))
    assert open(out, encoding="utf-8").read().splitlines() == ["|".join(RECORD_HEADERS)]


def test_escape_value():
    assert escape_value(" a|b ") == "a b"
    assert escape_value(None) == ""
    assert escape_value("BMW\r\n320d\nfacelift") == "BMW  320d facelift"


def test_line_breaks_never_split_a_row(tmp_path):
    rec = ListingRecord(link="https://www.mobile.bg/obiava-3-golf", title="VW Golf\nVariant")
    out = save_output_rows([rec], str(tmp_path / "cars.csv"))
    lines = open(out, encoding="utf-8").read().splitlines()

    assert len(lines) == 2
    assert lines[1].startswith("https://www.mobile.bg/obiava-3-golf|VW Golf Variant|")


def test_default_output_name():
    name = default_output_name()
    assert name.startswith("first-owner-cars-")
    assert name.endswith(".csv")
    assert ":" not in name


def test_record_file_round_trips_through_report_reader(tmp_path):
    out = save_output_rows(sample_records(), str(tmp_path / "cars.csv"))
    headers, rows = load_table(out)

    assert headers == RECORD_HEADERS
    assert rows[1][1] == 'Audi A4 "Avant"'
    assert rows[1][2] == ""


def test_infer_columns_bulgarian_and_english():
    assert infer_columns(RECORD_HEADERS) == {role: i for i, role in enumerate([
        "link", "title", "price", "year", "mileage", "fuel", "engine_volume",
        "horsepower", "transmission", "body_style", "matched_keyword",
    ])}
    english = ["Link", "Title", "Year", "Mileage", "Fuel", "Engine", "Horsepower",
               "Transmission", "Form", "Matched Keyword"]
    cols = infer_columns(english)
    assert cols["engine_volume"] == 5
    assert cols["matched_keyword"] == 9
    assert cols["price"] == -1
    assert infer_column_index(["Година", "year"], COLUMN_SYNONYMS["year"]) == 0


def test_build_html_escapes_and_marks_numbers():
    headers = list(RECORD_HEADERS)
    rows = [r.as_row() for r in sample_records()]
    rows[0][1] = "<BMW>"
    page = build_html(headers, rows)

    assert "&lt;BMW&gt;" in page
    assert "<BMW>" not in page
    assert 'data-num="120000"' in page
    assert 'href="https://www.mobile.bg/obiava-1-bmw-320"' in page
    assert 'data-key="price"' in page
    assert "Цена, " in page


def test_build_html_without_price_column():
    headers = [h for h in RECORD_HEADERS if h != "Цена"]
    page = build_html(headers, [["https://x/obiava-1", "T", "2010", "", "", "", "", "", "", "първи"]])
    assert 'data-key="price"' not in page
    assert "Цена, " not in page
    assert 'data-num="2010"' in page


def test_render_report_writes_html_beside_csv(tmp_path):
    csv_path = save_output_rows(sample_records(), str(tmp_path / "first-owner-cars-x.csv"))
    out = render_report(csv_path)
    assert out == tmp_path / "first-owner-cars-x.html"
    assert "obiava-2-audi-a4" in out.read_text(encoding="utf-8")


def test_find_csv_file(tmp_path):
    with pytest.raises(ReportError):
        find_csv_file(None, str(tmp_path))

    older = tmp_path / "a.csv"
    newer = tmp_path / "b.csv"
    older.write_text("x", encoding="utf-8")
    newer.write_text("y", encoding="utf-8")
    os.utime(older, (1_000_000, 1_000_000))
    os.utime(newer, (2_000_000, 2_000_000))

    assert find_csv_file(None, str(tmp_path)) == newer
    assert find_csv_file(str(older), str(tmp_path)) == older
    assert find_csv_file(str(tmp_path / "missing.csv"), str(tmp_path)) == newer


@pytest.fixture
def conn():
    c = db_connect(":memory:")
    yield c
    c.close()


def test_upsert_with_price_history(conn):
    rec = sample_records()[0]
    assert upsert_with_price_history(conn, rec) == (True, True)
    assert upsert_with_price_history(conn, rec) == (False, False)

    rec.price = "11900"
    assert upsert_with_price_history(conn, rec) == (False, True)

    stored = db_get_listing(conn, rec.link)
    assert db_get_listing(conn, "https://www.mobile.bg/obiava-9-unknown") is None
    assert stored["price"] == "11900"
    assert stored["matched_keyword"] == "история"
    assert list(export_price_history(conn, rec.link)["price"]) == ["12500", "11900"]


def test_upsert_without_price(conn):
    rec = sample_records()[1]
    assert upsert_with_price_history(conn, rec) == (True, False)
    assert export_price_history(conn).empty


def test_export_new_since_run(conn):
    upsert_with_price_history(conn, sample_records()[0])
    assert len(export_new_since_run(conn, "1970-01-01T00:00:00+00:00")) == 1
    assert export_new_since_run(conn, "2999-01-01T00:00:00+00:00").empty


def test_file_store_keeps_listings_between_connections(tmp_path):
    path = str(tmp_path / "cars.db")
    first = db_connect(path)
    try:
        upsert_with_price_history(first, sample_records()[0])
    finally:
        first.close()

    second = db_connect(path)
    try:
        stored = db_get_listing(second, sample_records()[0].link)
        assert stored["title"] == "BMW 320 | d"
        assert stored["first_seen"] == stored["last_seen"]
    finally:
        second.close()
