from __future__ import annotations

import json
from dataclasses import asdict

import pytest

from dashboard.errors import InputParseError
from dashboard.parsing import detect_format, parse_csv_rows, parse_json_rows, parse_text
from dashboard.rows import Row, normalize_records


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", "empty"),
        ("   \n\t ", "empty"),
        (None, "empty"),
        ('[{"date": "2024-01-01"}]', "json"),
        ('  {"rows": []}', "json"),
        ("date,sessions\n2024-01-01,3", "csv"),
    ],
)
def test_detect_format(text, expected):
    assert detect_format(text) == expected


def test_blank_input_yields_no_rows():
    result = parse_text("  \n ")
    assert result.format == "empty"
    assert result.rows == []


def test_csv_basic_row():
    result = parse_text("date,sessions,users\n2024-01-01,100,50\n")
    assert result.format == "csv"
    assert len(result.rows) == 1
    row = result.rows[0]
    assert row.date == "2024-01-01"
    assert row.sessions == 100
    assert row.users == 50
    assert row.pageviews == 0
    assert row.conversions == 0
    assert row.revenue == 0
    assert row.users_new == 0
    assert row.category == "direct"


def test_csv_drops_rows_without_date_and_skips_blank_lines():
    text = "date,sessions\n2024-01-01,5\n\n,7\n   \n2024-01-03,9\n"
    rows = parse_csv_rows(text)
    assert [(r.date, r.sessions) for r in rows] == [("2024-01-01", 5.0), ("2024-01-03", 9.0)]


def test_csv_headers_match_case_insensitively_and_unknown_columns_are_ignored():
    text = "Date,SESSIONS,Medium,utm_source,PageViews\n2024-02-01,12,Paid,google,30\n"
    [row] = parse_csv_rows(text)
    assert row.sessions == 12
    assert row.category == "paid"
    assert row.pageviews == 30


def test_csv_without_date_header_yields_nothing():
    assert parse_csv_rows("day,sessions\n2024-01-01,4\n") == []


def test_csv_non_numeric_cells_become_zero():
    [row] = parse_csv_rows("date,sessions,users\n2024-01-01,lots,-4\n")
    assert row.sessions == 0
    assert row.users == 0


def test_csv_short_and_long_lines():
    text = "date,sessions,users\n2024-01-01,3\n2024-01-02,4,5,extra\n"
    rows = parse_csv_rows(text)
    assert [(r.date, r.sessions, r.users) for r in rows] == [("2024-01-01", 3.0, 0.0), ("2024-01-02", 4.0, 5.0)]


def test_csv_quoted_fields():
    [row] = parse_csv_rows('date,category,sessions\n"2024-01-01","organic","7"\n')
    assert (row.date, row.category, row.sessions) == ("2024-01-01", "organic", 7.0)


def test_json_array():
    text = json.dumps(
        [
            {"date": "2024-01-01", "sessions": "12", "users": 5, "medium": "social"},
            {"date": "2024-01-02", "sessions": None, "users": "oops"},
        ]
    )
    result = parse_text(text)
    assert result.format == "json"
    assert [(r.date, r.sessions, r.users, r.category) for r in result.rows] == [
        ("2024-01-01", 12.0, 5.0, "social"),
        ("2024-01-02", 0.0, 0.0, "direct"),
    ]


def test_json_drops_non_objects_and_bad_dates():
    text = json.dumps([1, "x", None, {"sessions": 3}, {"date": ""}, {"date": 20240101}, {"date": "2024-01-05"}])
    rows = parse_json_rows(text)
    assert [r.date for r in rows] == ["2024-01-05"]


def test_json_envelope_with_rows_is_accepted():
    text = json.dumps({"ok": True, "rows": [{"date": "2024-01-01", "sessions": 2}]})
    [row] = parse_text(text).rows
    assert row.sessions == 2


def test_json_object_without_rows_is_rejected():
    with pytest.raises(InputParseError) as excinfo:
        parse_text('{"date": "2024-01-01"}')
    assert excinfo.value.format == "json"


def test_malformed_json_reports_a_specific_error():
    with pytest.raises(InputParseError) as excinfo:
        parse_text('[{"date": "2024-01-01", ]')
    assert excinfo.value.format == "json"
    assert "Invalid JSON" in str(excinfo.value)


def test_json_round_trip_ignores_extra_fields():
    rows = normalize_records(
        [
            {"date": "2024-01-01", "medium": "organic", "sessions": 10, "users": 8, "users_new": 3, "pageviews": 21, "conversions": 1, "revenue": 9.5},
            {"date": "2024-01-02", "medium": "email", "sessions": 4, "users": 4, "users_new": 4, "pageviews": 4, "conversions": 0, "revenue": 0},
        ]
    )
    payload = [dict(asdict(r), campaign="spring") for r in rows]
    parsed = parse_text(json.dumps(payload)).rows
    assert parsed == rows
    assert all(isinstance(r, Row) for r in parsed)


def test_csv_with_category_and_medium_columns():
    text = "date,category,medium,sessions\n2024-01-01,,social,3\n2024-01-02,organic,paid,4\n"
    rows = parse_csv_rows(text)
    assert [r.category for r in rows] == ["social", "organic"]


def test_csv_repeated_header_keeps_first_column():
    [row] = parse_csv_rows("date,Sessions,sessions\n2024-01-01,3,99\n")
    assert row.sessions == 3


def test_csv_unterminated_quote_is_a_parse_error():
    with pytest.raises(InputParseError) as excinfo:
        parse_text('date,sessions\n"2024-01-01,3\n')
    assert excinfo.value.format == "csv"
