from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone


def _create_quotation(client, headers, **overrides):
    body = {
        "client": f"Gobi {uuid.uuid4().hex[:8]}",
        "cargo_type": "FCL",
        "origin": "Tianjin",
        "destination": "Ulaanbaatar",
        "weight": "12000",
        "volume": "33",
        "estimated_cost": "4850.50",
        "payload": {
            "incoterm": "FOB",
            "currency": "USD",
            "customer_rates": [{"name": "Ocean freight", "amount": 3200, "currency": "USD"}],
        },
    }
    body.update(overrides)
    response = client.post("/quotations", json=body, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]


def test_create_assigns_yearly_number(client, sales_headers):
    first = _create_quotation(client, sales_headers)
    second = _create_quotation(client, sales_headers)

    year = datetime.now(timezone.utc).year
    assert re.fullmatch(rf"QUO-{year}-\d{{3,}}", first["quotation_number"])
    assert int(second["quotation_number"].rsplit("-", 1)[1]) > int(first["quotation_number"].rsplit("-", 1)[1])


def test_create_defaults_to_created(client, sales_headers, sales_user):
    q = _create_quotation(client, sales_headers)

    assert q["status"] == "CREATED"
    assert q["classification"] == {"is_active": True, "is_offer_sent": False, "is_approved": False}
    assert q["created_by"] == sales_user["username"]
    assert q["version"] == 1


def test_create_normalizes_status(client, sales_headers):
    assert _create_quotation(client, sales_headers, status="quotation")["status"] == "QUOTATION"
    assert _create_quotation(client, sales_headers, status="approved")["status"] == "CREATED"


def test_create_rejects_non_positive_cost(client, sales_headers):
    response = client.post(
        "/quotations",
        json={"client": "X", "cargo_type": "LCL", "origin": "A", "destination": "B", "estimated_cost": "0"},
        headers=sales_headers,
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_status_update_classifies(client, sales_headers):
    q = _create_quotation(client, sales_headers)

    response = client.patch(
        f"/quotations/{q['id']}/status",
        json={"status": "Confirmed", "version": q["version"]},
        headers=sales_headers,
    )
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["status"] == "CONFIRMED"
    assert data["classification"] == {"is_active": True, "is_offer_sent": True, "is_approved": True}
    assert data["version"] == 2

    response = client.patch(
        f"/quotations/{q['id']}/status",
        json={"status": "closed"},
        headers=sales_headers,
    )
    data = response.json()["data"]
    assert data["classification"]["is_active"] is False
    assert data["classification"]["is_approved"] is True


def test_same_status_is_a_no_op(client, sales_headers):
    q = _create_quotation(client, sales_headers)
    response = client.patch(f"/quotations/{q['id']}/status", json={"status": "created"}, headers=sales_headers)
    assert response.json()["data"]["version"] == 1


def test_status_update_version_conflict(client, sales_headers):
    q = _create_quotation(client, sales_headers)
    response = client.patch(
        f"/quotations/{q['id']}/status",
        json={"status": "ONGOING", "version": 5},
        headers=sales_headers,
    )
    assert response.status_code == 409
    assert response.json()["error_code"] == "QUOTATION_VERSION_CONFLICT"


def test_update_merges_payload(client, sales_headers):
    q = _create_quotation(client, sales_headers)

    response = client.patch(
        f"/quotations/{q['id']}",
        json={"destination": "Zamyn-Uud", "payload": {"remark": "Rail only"}, "version": 1},
        headers=sales_headers,
    )
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["destination"] == "Zamyn-Uud"
    assert data["payload"]["incoterm"] == "FOB"
    assert data["payload"]["remark"] == "Rail only"
    assert data["version"] == 2


def test_list_filters_status_in_any_casing(client, sales_headers):
    q = _create_quotation(client, sales_headers, status="ARRIVED")

    response = client.get(
        "/quotations",
        params={"status": "arrived", "search": q["client"]},
        headers=sales_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 1
    assert data["items"][0]["classification"]["is_offer_sent"] is True


def test_other_sales_user_cannot_see_quotation(client, sales_headers, other_sales_headers, admin_headers):
    q = _create_quotation(client, sales_headers)

    assert client.get(f"/quotations/{q['id']}", headers=other_sales_headers).status_code == 403
    assert client.get(f"/quotations/{q['id']}", headers=admin_headers).status_code == 200

    listed = client.get("/quotations", params={"search": q["client"]}, headers=other_sales_headers)
    assert listed.json()["data"]["total"] == 0


def test_print_returns_pdf(client, sales_headers):
    q = _create_quotation(client, sales_headers)

    response = client.get(f"/quotations/{q['id']}/print", headers=sales_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_delete_is_soft(client, sales_headers):
    q = _create_quotation(client, sales_headers)

    response = client.delete(f"/quotations/{q['id']}", params={"version": 1}, headers=sales_headers)
    assert response.status_code == 200

    response = client.get(f"/quotations/{q['id']}", headers=sales_headers)
    assert response.status_code == 404
    assert response.json()["error_code"] == "QUOTATION_NOT_FOUND"


def test_dashboard_counts_visible_quotations(client, make_user):
    _, headers = make_user(f"dash.{uuid.uuid4().hex[:6]}@freight.mn", "sales")

    _create_quotation(client, headers, status="QUOTATION")
    _create_quotation(client, headers, status="CONFIRMED")
    _create_quotation(client, headers, status="CANCELLED")

    response = client.get("/dashboard/metrics", headers=headers)
    assert response.status_code == 200, response.text
    summary = response.json()["data"]["quotations"]

    assert summary["total"] == 2
    assert summary["offer_sent"] == 2
    assert summary["approved"] == 1
    assert summary["by_status"]["CANCELLED"] == 1


def test_dashboard_range_outside_data_is_empty(client, sales_headers):
    response = client.get(
        "/dashboard/metrics",
        params={"start": "2001-01", "end": "2001-02"},
        headers=sales_headers,
    )
    data = response.json()["data"]
    assert data["range"] == {"start": "2001-01-01", "end": "2001-02-28"}
    assert data["quotations"]["total"] == 0
