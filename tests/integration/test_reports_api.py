from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone


def _create_quotation(client, headers, **overrides):
    body = {
        "client": f"Khan {uuid.uuid4().hex[:8]}",
        "cargo_type": "LCL",
        "origin": "Erenhot",
        "destination": "Ulaanbaatar",
        "estimated_cost": "1200",
    }
    body.update(overrides)
    response = client.post("/quotations", json=body, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]


def _today():
    return datetime.now(timezone.utc).date()


def _report(client, headers, **params):
    response = client.get("/reports/quotations", params=params, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]


# =====================================================
# QUOTATION REPORT
# =====================================================
def test_report_requires_reports_permission(client, sales_headers):
    response = client.get("/reports/quotations", headers=sales_headers)
    assert response.status_code == 403
    assert response.json()["error_code"] == "PERMISSION_DENIED"


def test_report_defaults_to_trailing_sixty_days(client, admin_headers):
    data = _report(client, admin_headers)

    today = _today()
    assert data["range"] == {
        "start": (today - timedelta(days=60)).isoformat(),
        "end": today.isoformat(),
    }
    assert data["summary"]["currency"] == "MNT"
    assert data["pagination"]["page"] == 1
    assert data["pagination"]["page_size"] == 5


def test_report_swaps_inverted_range(client, admin_headers):
    data = _report(client, admin_headers, start="2024-03-31", end="2024-03-01")
    assert data["range"] == {"start": "2024-03-01", "end": "2024-03-31"}
    assert data["summary"]["total_quotations"] == 0
    assert data["leaderboard"] == []


def test_report_counts_new_quotations(client, admin_headers, make_user):
    manager, headers = make_user(f"lead.{uuid.uuid4().hex[:6]}@freight.mn", "sales", name=f"Lead {uuid.uuid4().hex[:6]}")
    before = _report(client, admin_headers)["summary"]

    _create_quotation(client, headers, status="QUOTATION")
    _create_quotation(
        client,
        headers,
        status="CONFIRMED",
        sales_manager_id=manager["id"],
        payload={"profit": {"amount": 350, "currency": "usd"}},
    )

    after = _report(client, admin_headers, leaderboard_page_size=25)
    summary = after["summary"]

    assert summary["total_quotations"] - before["total_quotations"] == 2
    assert summary["offers_sent"] - before["offers_sent"] == 2
    assert summary["approved"] - before["approved"] == 1
    assert summary["profit_breakdown"]["USD"] - before["profit_breakdown"].get("USD", 0) == 350

    month = datetime.now(timezone.utc).strftime("%Y-%m")
    assert month in [bucket["key"] for bucket in after["timeline"]]

    names = []
    page, total = 1, after["pagination"]["total"]
    while len(names) < total:
        data = _report(client, admin_headers, leaderboard_page=page, leaderboard_page_size=25)
        names.extend(entry["name"] for entry in data["leaderboard"])
        page += 1
    assert manager["name"] in names
    assert manager["username"] in names


def test_report_rejects_oversized_page(client, admin_headers):
    response = client.get(
        "/reports/quotations",
        params={"leaderboard_page_size": 100},
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


# =====================================================
# DASHBOARD CALENDAR
# =====================================================
def test_calendar_places_quotations_on_their_status_day(client, make_user):
    _, headers = make_user(f"cal.{uuid.uuid4().hex[:6]}@freight.mn", "sales")
    today = _today()

    created = _create_quotation(client, headers)
    ongoing = _create_quotation(client, headers, status="ONGOING", payload={"est_departure_date": today.isoformat()})
    _create_quotation(client, headers, status="QUOTATION", payload={"quotation_date": "2031-01-01"})

    response = client.get(
        "/dashboard/calendar",
        params={
            "start": (today - timedelta(days=1)).isoformat(),
            "end": (today + timedelta(days=1)).isoformat(),
            "today": today.isoformat(),
        },
        headers=headers,
    )
    assert response.status_code == 200, response.text
    data = response.json()["data"]

    events = data["days"][today.isoformat()]
    assert [e["code"] for e in events] == [created["quotation_number"], ongoing["quotation_number"]]
    assert [e["status"] for e in events] == ["CREATED", "ONGOING"]
    assert events[0]["description"] == "Erenhot → Ulaanbaatar"

    summary = data["summary"]
    assert summary["total_events"] == 2
    assert summary["total_days"] == 1
    assert summary["status_counts"]["QUOTATION"] == 0
    assert summary["range"]["today"] == today.isoformat()


def test_calendar_is_scoped_for_sales_users(client, make_user, sales_headers):
    _, headers = make_user(f"cal.{uuid.uuid4().hex[:6]}@freight.mn", "sales")
    _create_quotation(client, sales_headers)
    today = _today().isoformat()

    response = client.get("/dashboard/calendar", params={"start": today, "end": today}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["summary"]["total_events"] == 0


def test_calendar_rejects_bad_ranges(client, sales_headers):
    response = client.get("/dashboard/calendar", params={"start": "2025-05-10", "end": "2025-05-01"}, headers=sales_headers)
    assert response.status_code == 400
    assert response.json()["error_code"] == "DASHBOARD_RANGE_INVALID"

    response = client.get("/dashboard/calendar", params={"start": "soon", "end": "2025-05-01"}, headers=sales_headers)
    assert response.status_code == 400

    response = client.get("/dashboard/calendar", params={"start": "2025-05-01"}, headers=sales_headers)
    assert response.status_code == 422
