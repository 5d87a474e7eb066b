from __future__ import annotations

import pytest

from app.models.enums.quotation_status import QuotationStatus
from app.services.quotations.quotation_status_core import (
    classify_quotation_status,
    is_active_status,
    is_approved_status,
    is_offer_sent_status,
    normalize_quotation_status,
    summarize_status_counts,
)


@pytest.mark.parametrize("raw", ["confirmed", "Confirmed", "CONFIRMED"])
def test_normalize_is_case_insensitive(raw):
    assert normalize_quotation_status(raw) is QuotationStatus.CONFIRMED


@pytest.mark.parametrize("raw", [None, "", "draft", "  released  ", "APPROVED"])
def test_unknown_values_fall_back_to_created(raw):
    assert normalize_quotation_status(raw) is QuotationStatus.CREATED


def test_closed_is_approved_but_not_active():
    c = classify_quotation_status("closed")
    assert c.status is QuotationStatus.CLOSED
    assert c.is_active is False
    assert c.is_offer_sent is False
    assert c.is_approved is True


def test_cancelled_has_no_flags():
    c = classify_quotation_status("CANCELLED")
    assert (c.is_active, c.is_offer_sent, c.is_approved) == (False, False, False)


def test_created_is_active_only():
    assert is_active_status("created") is True
    assert is_offer_sent_status("created") is False
    assert is_approved_status("created") is False


def test_offer_sent_covers_quotation_through_released():
    for status in ("QUOTATION", "CONFIRMED", "ONGOING", "ARRIVED", "RELEASED"):
        assert is_offer_sent_status(status) is True
    assert is_offer_sent_status("CLOSED") is False


def test_summary_counts_active_only_in_total():
    summary = summarize_status_counts(
        ["created", "QUOTATION", "confirmed", "released", "closed", "cancelled", "garbage"]
    )

    assert summary.total == 5
    assert summary.draft == 3
    assert summary.approved == 1
    assert summary.converted == 2
    assert summary.offer_sent == 3
    assert summary.by_status[QuotationStatus.CREATED] == 2
    assert summary.by_status[QuotationStatus.CANCELLED] == 1


def test_summary_of_nothing_is_zero():
    summary = summarize_status_counts([])
    assert summary.total == 0
    assert set(summary.by_status) == set(QuotationStatus)


def test_offer_sent_is_a_strict_subset_of_active():
    offer_sent = {s for s in QuotationStatus if is_offer_sent_status(s.value)}
    active = {s for s in QuotationStatus if is_active_status(s.value)}

    assert offer_sent < active
    assert active - offer_sent == {QuotationStatus.CREATED}


def test_approved_lies_within_active_or_closed():
    approved = {s for s in QuotationStatus if is_approved_status(s.value)}
    active = {s for s in QuotationStatus if is_active_status(s.value)}

    assert approved <= active | {QuotationStatus.CLOSED}
    assert QuotationStatus.CANCELLED not in approved | active


@pytest.mark.parametrize("status", list(QuotationStatus))
def test_every_status_normalizes_to_itself(status):
    assert normalize_quotation_status(status.value.lower()) is status
    c = classify_quotation_status(status.value)
    # offer sent implies active
    assert not c.is_offer_sent or c.is_active
