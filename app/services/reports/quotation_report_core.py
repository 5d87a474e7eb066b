# app/services/reports/quotation_report_core.py
"""
Quotation performance report.

Aggregates a window of quotations into headline counts, a per-salesperson
leaderboard, top approving clients and a monthly series. "Offer sent" and
"approved" use the same status sets as the rest of the app.

Profit is read from ``payload["profit"]`` (or ``payload["total_profit"]``) as
``{"amount": ..., "currency": ...}`` and kept per currency; amounts in
different currencies are never added together.
"""

import math
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from app.services.dashboard.dashboard_range_core import DateRange, as_utc
from app.services.quotations.quotation_status_core import (
    is_approved_status,
    is_offer_sent_status,
)

DEFAULT_LEADERBOARD_PAGE_SIZE = 5
MAX_LEADERBOARD_PAGE_SIZE = 25
TOP_CLIENTS_LIMIT = 5
DEFAULT_PROFIT_CURRENCY = "MNT"
UNASSIGNED = "Unassigned"


class ReportSummary(BaseModel):
    total_quotations: int
    offers_sent: int
    approved: int
    approval_rate: float
    profit_breakdown: dict[str, float]
    total_profit: float
    currency: Optional[str]


class LeaderboardEntry(BaseModel):
    name: str
    quotations: int = 0
    offers_sent: int = 0
    approved: int = 0
    approval_rate: float = 0.0
    profit_breakdown: dict[str, float] = {}


class ClientEntry(BaseModel):
    client: str
    quotations: int = 0
    approvals: int = 0
    profit_breakdown: dict[str, float] = {}


class TimelineBucket(BaseModel):
    key: str
    label: str
    quotations: int = 0
    offers_sent: int = 0
    approved: int = 0
    profit_breakdown: dict[str, float] = {}


class ReportRange(BaseModel):
    start: str
    end: str


class ReportTotals(BaseModel):
    sales_people: int
    clients: int
    approved_clients: int


class LeaderboardPage(BaseModel):
    page: int
    page_size: int
    total: int


class QuotationReport(BaseModel):
    summary: ReportSummary
    leaderboard: list[LeaderboardEntry]
    top_clients: list[ClientEntry]
    timeline: list[TimelineBucket]
    range: ReportRange
    totals: ReportTotals
    pagination: LeaderboardPage


# =====================================================
# PROFIT
# =====================================================
def extract_profit(payload: Any) -> Optional[tuple[str, float]]:
    if not isinstance(payload, dict):
        return None
    profit = payload.get("profit") or payload.get("total_profit")
    if not isinstance(profit, dict):
        return None

    raw_amount = next(
        (profit[k] for k in ("amount", "value", "total") if profit.get(k) is not None),
        0,
    )
    try:
        amount = float(raw_amount)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount):
        return None

    currency = profit.get("currency") if isinstance(profit.get("currency"), str) else profit.get("code")
    currency = currency.strip().upper() if isinstance(currency, str) and currency.strip() else DEFAULT_PROFIT_CURRENCY
    return currency, amount


def add_profit(breakdown: dict[str, float], profit: Optional[tuple[str, float]]) -> None:
    if profit is None:
        return
    currency, amount = profit
    breakdown[currency] = breakdown.get(currency, 0.0) + amount


# =====================================================
# GROUPING KEYS
# =====================================================
def salesperson_for(quotation: Any) -> str:
    payload = quotation.payload if isinstance(quotation.payload, dict) else {}
    manager = getattr(quotation, "sales_manager", None)

    candidates = (
        manager.display_name if manager is not None else None,
        payload.get("sales_manager"),
        payload.get("sales_manager_name"),
        payload.get("sales_manager_email"),
        quotation.created_by_email,
    )
    for candidate in candidates:
        if candidate and str(candidate).strip():
            return str(candidate).strip()
    return UNASSIGNED


def client_for(quotation: Any) -> str:
    payload = quotation.payload if isinstance(quotation.payload, dict) else {}
    return str(quotation.client or payload.get("client") or "").strip()


def clamp_page_size(page_size: Optional[int]) -> int:
    return min(max(page_size or DEFAULT_LEADERBOARD_PAGE_SIZE, 1), MAX_LEADERBOARD_PAGE_SIZE)


# =====================================================
# REPORT
# =====================================================
def build_quotation_report(
    quotations: Iterable[Any],
    window: DateRange,
    leaderboard_page: int = 1,
    leaderboard_page_size: Optional[int] = None,
) -> QuotationReport:
    """``quotations`` should arrive oldest first; ties in the leaderboard keep that order."""
    total = offers_sent = approved_total = 0
    profit_breakdown: dict[str, float] = {}

    sales: dict[str, LeaderboardEntry] = {}
    clients: dict[str, ClientEntry] = {}
    timeline: dict[str, TimelineBucket] = {}

    for quotation in quotations:
        offer_sent = is_offer_sent_status(quotation.status)
        approved = is_approved_status(quotation.status)
        profit = extract_profit(quotation.payload)

        total += 1
        offers_sent += offer_sent
        approved_total += approved
        add_profit(profit_breakdown, profit)

        created = as_utc(quotation.created_at)
        month_key = created.strftime("%Y-%m")
        bucket = timeline.setdefault(
            month_key, TimelineBucket(key=month_key, label=created.strftime("%b %Y"))
        )
        bucket.quotations += 1
        bucket.offers_sent += offer_sent
        bucket.approved += approved
        add_profit(bucket.profit_breakdown, profit)

        name = salesperson_for(quotation)
        entry = sales.setdefault(name, LeaderboardEntry(name=name))
        entry.quotations += 1
        entry.offers_sent += offer_sent
        entry.approved += approved
        add_profit(entry.profit_breakdown, profit)

        client_name = client_for(quotation)
        if client_name:
            client_entry = clients.setdefault(client_name, ClientEntry(client=client_name))
            client_entry.quotations += 1
            client_entry.approvals += approved
            add_profit(client_entry.profit_breakdown, profit)

    for entry in sales.values():
        entry.approval_rate = entry.approved / entry.offers_sent if entry.offers_sent else 0.0

    leaderboard = sorted(sales.values(), key=lambda e: (-e.approved, -e.quotations))

    page_size = clamp_page_size(leaderboard_page_size)
    total_pages = max(1, -(-len(leaderboard) // page_size))
    page = min(max(leaderboard_page, 1), total_pages)
    offset = (page - 1) * page_size

    approving_clients = [c for c in clients.values() if c.approvals > 0]
    top_clients = sorted(approving_clients, key=lambda c: (-c.approvals, -c.quotations))[:TOP_CLIENTS_LIMIT]

    return QuotationReport(
        summary=ReportSummary(
            total_quotations=total,
            offers_sent=offers_sent,
            approved=approved_total,
            approval_rate=approved_total / total if total else 0.0,
            profit_breakdown=profit_breakdown,
            total_profit=profit_breakdown.get(DEFAULT_PROFIT_CURRENCY, 0.0),
            currency=DEFAULT_PROFIT_CURRENCY,
        ),
        leaderboard=leaderboard[offset:offset + page_size],
        top_clients=top_clients,
        timeline=[timeline[key] for key in sorted(timeline)],
        range=ReportRange(start=window.start_date.isoformat(), end=window.end_date.isoformat()),
        totals=ReportTotals(
            sales_people=len(sales),
            clients=len(clients),
            approved_clients=len(approving_clients),
        ),
        pagination=LeaderboardPage(page=page, page_size=page_size, total=len(leaderboard)),
    )
