from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from app.services.dashboard.dashboard_range_core import DateRange, end_of_day, start_of_day
from app.services.reports.quotation_report_core import (
    DEFAULT_LEADERBOARD_PAGE_SIZE,
    MAX_LEADERBOARD_PAGE_SIZE,
    build_quotation_report,
    clamp_page_size,
    extract_profit,
    salesperson_for,
)

WINDOW = DateRange(start=start_of_day(date(2025, 1, 1)), end=end_of_day(date(2025, 3, 1)))


def _quotation(status, created_at, client="Gobi Trade", created_by="bat@freight.mn", payload=None, manager=None):
    return SimpleNamespace(
        status=status,
        client=client,
        created_by_email=created_by,
        payload=payload,
        sales_manager=manager,
        created_at=created_at,
    )


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"profit": {"amount": 1500, "currency": "usd"}}, ("USD", 1500.0)),
        ({"total_profit": {"value": "200.5"}}, ("MNT", 200.5)),
        ({"profit": {"total": 10, "code": "CNY"}}, ("CNY", 10.0)),
        ({"profit": {"amount": "n/a"}}, None),
        ({"profit": 300}, None),
        ({}, None),
        (None, None),
    ],
)
def test_extract_profit(payload, expected):
    assert extract_profit(payload) == expected


def test_salesperson_prefers_assigned_manager():
    manager = SimpleNamespace(display_name="Saraa")
    assert salesperson_for(_quotation("CREATED", datetime(2025, 1, 5), manager=manager)) == "Saraa"
    assert salesperson_for(
        _quotation("CREATED", datetime(2025, 1, 5), payload={"sales_manager_name": " Dorj "})
    ) == "Dorj"
    assert salesperson_for(_quotation("CREATED", datetime(2025, 1, 5))) == "bat@freight.mn"
    assert salesperson_for(_quotation("CREATED", datetime(2025, 1, 5), created_by="  ")) == "Unassigned"


def test_report_counts_and_profit_per_currency():
    rows = [
        _quotation("CREATED", datetime(2025, 1, 3)),
        _quotation("QUOTATION", datetime(2025, 1, 20), payload={"profit": {"amount": 100, "currency": "USD"}}),
        _quotation("confirmed", datetime(2025, 2, 2), payload={"profit": {"amount": 500000}}),
        _quotation("CLOSED", datetime(2025, 2, 9), client="Erdenet", payload={"profit": {"amount": 250000}}),
    ]
    report = build_quotation_report(rows, WINDOW)

    assert report.summary.total_quotations == 4
    assert report.summary.offers_sent == 2
    assert report.summary.approved == 2
    assert report.summary.approval_rate == pytest.approx(0.5)
    assert report.summary.profit_breakdown == {"USD": 100.0, "MNT": 750000.0}
    assert report.summary.total_profit == 750000.0
    assert report.summary.currency == "MNT"
    assert report.range.start == "2025-01-01"
    assert report.range.end == "2025-03-01"


def test_timeline_is_monthly_and_sorted():
    rows = [
        _quotation("CONFIRMED", datetime(2025, 2, 2)),
        _quotation("CREATED", datetime(2025, 1, 3)),
        _quotation("QUOTATION", datetime(2025, 1, 20)),
    ]
    timeline = build_quotation_report(rows, WINDOW).timeline

    assert [b.key for b in timeline] == ["2025-01", "2025-02"]
    assert [b.quotations for b in timeline] == [2, 1]
    assert timeline[0].offers_sent == 1
    assert timeline[1].approved == 1
    assert timeline[0].label == "Jan 2025"


def test_leaderboard_ranks_by_approvals_then_volume():
    rows = [
        _quotation("CREATED", datetime(2025, 1, 3), created_by="a@freight.mn"),
        _quotation("CREATED", datetime(2025, 1, 4), created_by="a@freight.mn"),
        _quotation("CONFIRMED", datetime(2025, 1, 5), created_by="b@freight.mn"),
        _quotation("QUOTATION", datetime(2025, 1, 6), created_by="c@freight.mn"),
    ]
    report = build_quotation_report(rows, WINDOW)

    assert [e.name for e in report.leaderboard] == ["b@freight.mn", "a@freight.mn", "c@freight.mn"]
    assert report.leaderboard[0].approval_rate == pytest.approx(1.0)
    assert report.leaderboard[1].approval_rate == 0.0
    assert report.totals.sales_people == 3


def test_leaderboard_paging_clamps_to_last_page():
    rows = [
        _quotation("CREATED", datetime(2025, 1, 3), created_by=f"user{i}@freight.mn")
        for i in range(7)
    ]
    report = build_quotation_report(rows, WINDOW, leaderboard_page=9, leaderboard_page_size=3)

    assert report.pagination.page == 3
    assert report.pagination.page_size == 3
    assert report.pagination.total == 7
    assert [e.name for e in report.leaderboard] == ["user6@freight.mn"]


def test_top_clients_only_include_approvals():
    rows = [
        _quotation("CREATED", datetime(2025, 1, 3), client="Quiet LLC"),
        _quotation("RELEASED", datetime(2025, 1, 4), client="Erdenet"),
        _quotation("CLOSED", datetime(2025, 1, 5), client="Erdenet"),
        _quotation("CONFIRMED", datetime(2025, 1, 6), client="Gobi Trade"),
        _quotation("CONFIRMED", datetime(2025, 1, 7), client=""),
    ]
    report = build_quotation_report(rows, WINDOW)

    assert [(c.client, c.approvals) for c in report.top_clients] == [("Erdenet", 2), ("Gobi Trade", 1)]
    assert report.totals.clients == 3
    assert report.totals.approved_clients == 2


def test_empty_report():
    report = build_quotation_report([], WINDOW)

    assert report.summary.total_quotations == 0
    assert report.summary.approval_rate == 0.0
    assert report.leaderboard == []
    assert report.pagination.page == 1
    assert report.pagination.total == 0


@pytest.mark.parametrize(
    "requested, expected",
    [(None, DEFAULT_LEADERBOARD_PAGE_SIZE), (0, DEFAULT_LEADERBOARD_PAGE_SIZE), (3, 3), (500, MAX_LEADERBOARD_PAGE_SIZE)],
)
def test_clamp_page_size(requested, expected):
    assert clamp_page_size(requested) == expected
