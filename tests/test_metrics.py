from __future__ import annotations

import random

import pytest

from dashboard.metrics import Delta, Totals, aggregate_totals, compute_delta
from dashboard.rows import rows_to_frame

from tests.factories import make_rows


def test_aggregate_sums_each_metric():
    totals = aggregate_totals(rows_to_frame(make_rows(3, categories=("direct", "paid"))))
    assert totals == Totals(
        sessions=60.0,
        users=48.0,
        pageviews=150.0,
        conversions=6.0,
        revenue=75.0,
        users_new=18.0,
        users_returning=30.0,
    )


def test_aggregate_is_order_independent():
    rows = make_rows(10, categories=("direct", "organic", "email"))
    shuffled = rows[:]
    random.Random(7).shuffle(shuffled)
    assert aggregate_totals(rows_to_frame(rows)) == aggregate_totals(rows_to_frame(shuffled))


def test_empty_collection_gives_zero_totals():
    totals = aggregate_totals(rows_to_frame([]))
    assert totals == Totals()
    assert totals.pages_per_visit == 0
    assert totals.conversion_rate == 0


def test_derived_ratios():
    totals = Totals(sessions=200, pageviews=500, conversions=5)
    assert totals.pages_per_visit == pytest.approx(2.5)
    assert totals.conversion_rate == pytest.approx(2.5)
    assert totals.to_dict()["pages_per_visit"] == pytest.approx(2.5)


def test_ratios_without_sessions_are_zero():
    totals = Totals(sessions=0, pageviews=40, conversions=3)
    assert totals.pages_per_visit == 0
    assert totals.conversion_rate == 0


@pytest.mark.parametrize(
    "current, previous, expected",
    [
        (150, 100, Delta(50.0, "up")),
        (50, 100, Delta(-50.0, "down")),
        (100, 100, Delta(0.0, "up")),
        (50, 0, Delta(100.0, "up")),
        (0, 0, Delta(0.0, "up")),
        (0, -5, Delta(0.0, "up")),
        (-1, 0, Delta(0.0, "down")),
    ],
)
def test_compute_delta(current, previous, expected):
    assert compute_delta(current, previous) == expected
