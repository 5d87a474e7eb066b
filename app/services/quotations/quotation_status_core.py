# app/services/quotations/quotation_status_core.py
"""
Quotation lifecycle classification.

Status strings arrive from forms, filters and legacy rows in any casing.
Everything is funnelled through ``normalize_quotation_status`` which never
fails: anything it does not recognise is treated as ``CREATED``.

Transitions are deliberately not validated here; staff may move a
quotation to any status.
"""

from typing import Iterable

from pydantic import BaseModel

from app.models.enums.quotation_status import QuotationStatus

STATUS_ALIAS: dict[str, QuotationStatus] = {
    status.value: status for status in QuotationStatus
}

ACTIVE_STATUSES = frozenset({
    QuotationStatus.CREATED,
    QuotationStatus.QUOTATION,
    QuotationStatus.CONFIRMED,
    QuotationStatus.ONGOING,
    QuotationStatus.ARRIVED,
    QuotationStatus.RELEASED,
})

OFFER_SENT_STATUSES = frozenset({
    QuotationStatus.QUOTATION,
    QuotationStatus.CONFIRMED,
    QuotationStatus.ONGOING,
    QuotationStatus.ARRIVED,
    QuotationStatus.RELEASED,
})

APPROVED_STATUSES = frozenset({
    QuotationStatus.CONFIRMED,
    QuotationStatus.RELEASED,
    QuotationStatus.CLOSED,
})


def normalize_quotation_status(raw: str | None) -> QuotationStatus:
    key = (raw or "").upper()
    return STATUS_ALIAS.get(key, QuotationStatus.CREATED)


def is_active_status(raw: str | None) -> bool:
    return normalize_quotation_status(raw) in ACTIVE_STATUSES


def is_offer_sent_status(raw: str | None) -> bool:
    return normalize_quotation_status(raw) in OFFER_SENT_STATUSES


def is_approved_status(raw: str | None) -> bool:
    return normalize_quotation_status(raw) in APPROVED_STATUSES


class QuotationClassification(BaseModel):
    status: QuotationStatus
    is_active: bool
    is_offer_sent: bool
    is_approved: bool


def classify_quotation_status(raw: str | None) -> QuotationClassification:
    status = normalize_quotation_status(raw)
    return QuotationClassification(
        status=status,
        is_active=status in ACTIVE_STATUSES,
        is_offer_sent=status in OFFER_SENT_STATUSES,
        is_approved=status in APPROVED_STATUSES,
    )


class QuotationStatusSummary(BaseModel):
    total: int
    draft: int
    approved: int
    converted: int
    offer_sent: int
    by_status: dict[QuotationStatus, int]


def summarize_status_counts(statuses: Iterable[str | None]) -> QuotationStatusSummary:
    """Dashboard counters; ``total`` counts active quotations only."""
    counts = {status: 0 for status in QuotationStatus}
    for raw in statuses:
        counts[normalize_quotation_status(raw)] += 1

    return QuotationStatusSummary(
        total=sum(counts[s] for s in ACTIVE_STATUSES),
        draft=counts[QuotationStatus.CREATED] + counts[QuotationStatus.QUOTATION],
        approved=counts[QuotationStatus.CONFIRMED],
        converted=counts[QuotationStatus.RELEASED] + counts[QuotationStatus.CLOSED],
        offer_sent=sum(counts[s] for s in OFFER_SENT_STATUSES),
        by_status=counts,
    )
