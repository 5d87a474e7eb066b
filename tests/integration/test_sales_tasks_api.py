from __future__ import annotations

import uuid


def _create_task(client, headers, **overrides):
    body = {
        "client_name": f"Client {uuid.uuid4().hex[:8]}",
        "commodity": "Coal",
        "origin_country": "Mongolia",
        "destination_country": "China",
    }
    body.update(overrides)
    response = client.post("/sales-tasks", json=body, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]


def test_create_records_initial_stage(client, sales_headers, sales_user):
    task = _create_task(client, sales_headers, main_comment="Intro call booked")

    assert task["status"] == "MEET"
    assert task["version"] == 1
    assert task["created_by_email"] == sales_user["username"]
    assert task["progress"]["MEET"]["completed"] is True
    assert task["progress"]["MEET"]["completed_by_name"] == "Bat"
    assert task["progress"]["CONTRACT"]["completed"] is False
    assert len(task["logs"]) == 1
    assert task["logs"][0]["comment"] == "Intro call booked"


def test_create_with_initial_stage_in_any_casing(client, sales_headers):
    task = _create_task(client, sales_headers, status="give_info")
    assert task["status"] == "GIVE_INFO"
    assert task["progress"]["MEET"]["completed"] is False
    assert task["logs"][0]["comment"] == "Task created"


def test_create_rejects_unknown_stage(client, sales_headers):
    response = client.post(
        "/sales-tasks",
        json={"client_name": "Bad stage", "status": "WON"},
        headers=sales_headers,
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "SALES_TASK_INVALID_STAGE"


def test_stage_updates_move_overall_status(client, sales_headers):
    task = _create_task(client, sales_headers)

    response = client.patch(
        f"/sales-tasks/{task['id']}/status",
        json={"status": "meeting_date", "comment": "Met at their office", "version": 1},
        headers=sales_headers,
    )
    assert response.status_code == 200, response.text
    data = response.json()["data"]

    assert data["task"]["status"] == "MEETING_DATE"
    assert data["task"]["version"] == 2
    assert data["task"]["progress"]["CONTACT_BY_PHONE"]["completed"] is False
    assert data["log"]["status"] == "MEETING_DATE"
    assert data["log"]["completed"] is True

    response = client.patch(
        f"/sales-tasks/{task['id']}/status",
        json={"status": "MEETING_DATE", "completed": False},
        headers=sales_headers,
    )
    data = response.json()["data"]
    assert data["task"]["status"] == "MEET"
    assert data["task"]["progress"]["MEETING_DATE"]["completed_at"] is None


def test_status_update_version_conflict(client, sales_headers):
    task = _create_task(client, sales_headers)

    response = client.patch(
        f"/sales-tasks/{task['id']}/status",
        json={"status": "CONTRACT", "version": 99},
        headers=sales_headers,
    )
    assert response.status_code == 409
    assert response.json()["error_code"] == "SALES_TASK_VERSION_CONFLICT"


def test_status_log_is_newest_first(client, sales_headers):
    task = _create_task(client, sales_headers)
    for stage in ("CONTACT_BY_PHONE", "GIVE_INFO"):
        client.patch(f"/sales-tasks/{task['id']}/status", json={"status": stage}, headers=sales_headers)

    response = client.get(f"/sales-tasks/{task['id']}/status", headers=sales_headers)
    assert response.status_code == 200
    stages = [log["status"] for log in response.json()["data"]]
    assert stages == ["GIVE_INFO", "CONTACT_BY_PHONE", "MEET"]

    detail = client.get(f"/sales-tasks/{task['id']}", headers=sales_headers).json()["data"]
    assert [log["status"] for log in detail["logs"]] == ["MEET", "CONTACT_BY_PHONE", "GIVE_INFO"]


def test_sales_users_only_see_their_own_tasks(client, sales_headers, other_sales_headers, admin_headers):
    task = _create_task(client, sales_headers)

    response = client.get(f"/sales-tasks/{task['id']}", headers=other_sales_headers)
    assert response.status_code == 403
    assert response.json()["error_code"] == "PERMISSION_DENIED"

    response = client.patch(
        f"/sales-tasks/{task['id']}/status",
        json={"status": "CONTRACT"},
        headers=other_sales_headers,
    )
    assert response.status_code == 403

    listed = client.get("/sales-tasks", params={"search": task["client_name"]}, headers=other_sales_headers)
    assert listed.json()["data"]["total"] == 0

    listed = client.get("/sales-tasks", params={"search": task["client_name"]}, headers=admin_headers)
    assert listed.json()["data"]["total"] == 1


def test_assigned_manager_can_work_the_task(client, admin_headers, sales_headers, sales_user):
    task = _create_task(client, admin_headers, sales_manager_id=sales_user["id"])
    assert task["sales_manager_name"] == "Bat"

    response = client.patch(
        f"/sales-tasks/{task['id']}/status",
        json={"status": "CONTACT_BY_PHONE"},
        headers=sales_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["task"]["progress"]["CONTACT_BY_PHONE"]["completed_by_email"] == sales_user["username"]


def test_list_filters_by_status(client, sales_headers):
    task = _create_task(client, sales_headers, status="CONTRACT", commodity=f"Copper {uuid.uuid4().hex[:6]}")

    response = client.get(
        "/sales-tasks",
        params={"status": "contract", "search": task["commodity"]},
        headers=sales_headers,
    )
    items = response.json()["data"]["items"]
    assert [i["id"] for i in items] == [task["id"]]

    response = client.get(
        "/sales-tasks",
        params={"status": "MEET", "search": task["commodity"]},
        headers=sales_headers,
    )
    assert response.json()["data"]["total"] == 0


def test_rebuild_progress_is_admin_only_and_idempotent(client, sales_headers, admin_headers):
    task = _create_task(client, sales_headers)
    for body in (
        {"status": "GIVE_INFO"},
        {"status": "CONTACT_BY_PHONE"},
        {"status": "CONTACT_BY_PHONE", "completed": False},
    ):
        response = client.patch(f"/sales-tasks/{task['id']}/status", json=body, headers=sales_headers)
        assert response.status_code == 200, response.text
    incremental = response.json()["data"]["task"]

    response = client.post(f"/sales-tasks/{task['id']}/progress/rebuild", headers=sales_headers)
    assert response.status_code == 403

    response = client.post(f"/sales-tasks/{task['id']}/progress/rebuild", headers=admin_headers)
    assert response.status_code == 200, response.text
    rebuilt = response.json()["data"]

    assert rebuilt["status"] == "GIVE_INFO"
    assert rebuilt["progress"]["MEET"]["completed"] is True
    assert rebuilt["progress"]["GIVE_INFO"]["completed"] is True
    assert rebuilt["progress"]["CONTACT_BY_PHONE"]["completed"] is False
    assert rebuilt["progress"]["CONTRACT"]["completed"] is False
    assert rebuilt["progress"] == incremental["progress"]
    assert rebuilt["status"] == incremental["status"]

    response = client.post(f"/sales-tasks/{task['id']}/progress/rebuild", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["progress"] == rebuilt["progress"]


def test_delete_hides_task(client, sales_headers):
    task = _create_task(client, sales_headers)

    response = client.delete(f"/sales-tasks/{task['id']}", headers=sales_headers)
    assert response.status_code == 200

    response = client.get(f"/sales-tasks/{task['id']}", headers=sales_headers)
    assert response.status_code == 404
    assert response.json()["error_code"] == "SALES_TASK_NOT_FOUND"


def test_plain_users_cannot_reach_sales_tasks(client, make_user):
    _, headers = make_user(f"viewer.{uuid.uuid4().hex[:6]}@freight.mn", "user")

    assert client.get("/sales-tasks", headers=headers).status_code == 403


def test_requires_authentication(client):
    assert client.get("/sales-tasks").status_code == 401
