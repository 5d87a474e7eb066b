from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.enums.sales_task_stage import SalesTaskStage
from app.services.sales.sales_task_progress_core import (
    SALES_TASK_STAGE_ORDER,
    StageActor,
    StatusLogEntry,
    empty_progress,
    ensure_progress,
    parse_stage,
    progress_to_json,
    project_progress,
    record_stage_event,
    resolve_overall_status,
)

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
BAT = StageActor(user_id=7, name="Bat", email="bat@freight.mn")


def _entry(stage, completed, minutes, name="Bat"):
    return StatusLogEntry(
        status=stage,
        completed=completed,
        created_by_name=name,
        created_by_email=f"{name.lower()}@freight.mn",
        created_at=T0 + timedelta(minutes=minutes),
    )


def test_stage_order_is_pipeline_order():
    assert [s.value for s in SALES_TASK_STAGE_ORDER] == [
        "MEET",
        "CONTACT_BY_PHONE",
        "MEETING_DATE",
        "GIVE_INFO",
        "CONTRACT",
    ]


def test_empty_progress_resolves_to_first_stage():
    progress = empty_progress()
    assert all(not p.completed for p in progress.values())
    assert resolve_overall_status(progress) is SalesTaskStage.MEET


def test_overall_status_is_furthest_completed_stage():
    progress, _ = record_stage_event(empty_progress(), "MEET", True, actor=BAT, at=T0)
    progress, _ = record_stage_event(progress, "give_info", True, actor=BAT, at=T0 + timedelta(hours=1))

    # stages are independent; skipping ahead does not fill the gap
    assert progress[SalesTaskStage.CONTACT_BY_PHONE].completed is False
    assert resolve_overall_status(progress) is SalesTaskStage.GIVE_INFO


def test_uncompleting_clears_stage_and_attribution():
    progress, _ = record_stage_event(empty_progress(), "MEET", True, actor=BAT, at=T0)
    progress, _ = record_stage_event(progress, "CONTACT_BY_PHONE", True, actor=BAT, at=T0)
    progress, entry = record_stage_event(progress, "CONTACT_BY_PHONE", False, actor=BAT)

    assert entry.completed is False
    assert progress[SalesTaskStage.CONTACT_BY_PHONE].completed_by_name is None
    assert progress[SalesTaskStage.CONTACT_BY_PHONE].completed_at is None
    assert resolve_overall_status(progress) is SalesTaskStage.MEET


def test_record_does_not_mutate_input():
    before = empty_progress()
    record_stage_event(before, "CONTRACT", True, actor=BAT)
    assert before[SalesTaskStage.CONTRACT].completed is False


def test_completion_records_actor_and_time():
    progress, entry = record_stage_event(
        empty_progress(), "MEETING_DATE", True, actor=BAT, comment="Met at office", at=T0
    )
    stage = progress[SalesTaskStage.MEETING_DATE]

    assert stage.completed_at == T0
    assert stage.completed_by_name == "Bat"
    assert stage.completed_by_email == "bat@freight.mn"
    assert entry.comment == "Met at office"
    assert entry.created_by_id == 7


def test_completion_without_actor_is_rejected():
    with pytest.raises(AppException) as exc:
        record_stage_event(empty_progress(), "MEET", True, actor=StageActor(name="  "))
    assert exc.value.status_code == 400
    assert exc.value.error_code == ErrorCode.SALES_TASK_ACTOR_REQUIRED


def test_uncompletion_without_actor_is_allowed():
    progress, entry = record_stage_event(empty_progress(), "MEET", False)
    assert entry.created_by_name is None
    assert progress[SalesTaskStage.MEET].completed is False


@pytest.mark.parametrize("raw", ["meet", " Contract ", SalesTaskStage.GIVE_INFO])
def test_parse_stage_accepts_any_casing(raw):
    assert parse_stage(raw) in SALES_TASK_STAGE_ORDER


@pytest.mark.parametrize("raw", ["", None, "CLOSED", "invoice"])
def test_parse_stage_rejects_unknown(raw):
    with pytest.raises(AppException) as exc:
        parse_stage(raw)
    assert exc.value.status_code == 400
    assert exc.value.error_code == ErrorCode.SALES_TASK_INVALID_STAGE
    assert "MEET" in exc.value.details["allowed"]


def test_projection_uses_latest_entry_per_stage():
    logs = [
        _entry(SalesTaskStage.MEET, True, 0),
        _entry(SalesTaskStage.CONTACT_BY_PHONE, True, 10),
        _entry(SalesTaskStage.CONTACT_BY_PHONE, False, 20),
        _entry(SalesTaskStage.MEETING_DATE, True, 30, name="Saraa"),
    ]
    progress = project_progress(reversed(logs))

    assert progress[SalesTaskStage.MEET].completed is True
    assert progress[SalesTaskStage.CONTACT_BY_PHONE].completed is False
    assert progress[SalesTaskStage.MEETING_DATE].completed_by_name == "Saraa"
    assert resolve_overall_status(progress) is SalesTaskStage.MEETING_DATE


def test_projection_tie_keeps_insertion_order():
    logs = [
        _entry(SalesTaskStage.GIVE_INFO, True, 5),
        _entry(SalesTaskStage.GIVE_INFO, False, 5),
    ]
    assert project_progress(logs)[SalesTaskStage.GIVE_INFO].completed is False
    assert project_progress(list(reversed(logs)))[SalesTaskStage.GIVE_INFO].completed is True


def test_projection_of_empty_log_is_empty_progress():
    assert project_progress([]) == empty_progress()


def test_ensure_progress_drops_untrusted_records():
    raw = {
        "MEET": {"completed": True, "completed_at": "2025-03-01T09:00:00Z", "completed_by_name": "Bat"},
        "CONTACT_BY_PHONE": {"completed": "yes", "completed_at": "2025-03-01T10:00:00Z"},
        "MEETING_DATE": {"completed": True},
        "GIVE_INFO": "garbage",
        "UNKNOWN": {"completed": True, "completed_at": "2025-03-01T10:00:00Z"},
    }
    progress = ensure_progress(raw)

    assert set(progress) == set(SALES_TASK_STAGE_ORDER)
    assert progress[SalesTaskStage.MEET].completed is True
    assert progress[SalesTaskStage.MEET].completed_at == T0
    assert progress[SalesTaskStage.CONTACT_BY_PHONE].completed is False
    assert progress[SalesTaskStage.MEETING_DATE].completed is False
    assert progress[SalesTaskStage.GIVE_INFO].completed is False


@pytest.mark.parametrize("raw", [None, [], "x", 3])
def test_ensure_progress_tolerates_non_mapping(raw):
    assert ensure_progress(raw) == empty_progress()


def test_json_shape_survives_storage():
    progress, _ = record_stage_event(empty_progress(), "MEET", True, actor=BAT, at=T0)
    stored = progress_to_json(progress)

    assert list(stored) == [s.value for s in SALES_TASK_STAGE_ORDER]
    assert stored["MEET"]["completed"] is True
    assert ensure_progress(stored) == progress


def test_two_completions_log_in_order_and_advance_status():
    alice = StageActor(name="Alice", email="alice@freight.mn")
    bob = StageActor(name="Bob", email="bob@freight.mn")
    t1, t2 = T0, T0 + timedelta(minutes=15)

    log = []
    progress, entry = record_stage_event(empty_progress(), "MEET", True, actor=alice, at=t1)
    log.append(entry)
    progress, entry = record_stage_event(progress, "CONTACT_BY_PHONE", True, actor=bob, at=t2)
    log.append(entry)

    assert [e.created_at for e in log] == [t1, t2]
    assert [e.status for e in log] == [SalesTaskStage.MEET, SalesTaskStage.CONTACT_BY_PHONE]
    assert resolve_overall_status(progress) is SalesTaskStage.CONTACT_BY_PHONE
    assert progress[SalesTaskStage.MEET].completed_by_name == "Alice"
    assert progress[SalesTaskStage.CONTACT_BY_PHONE].completed_by_name == "Bob"
    assert project_progress(log) == progress


def test_projection_is_idempotent():
    logs = [
        _entry(SalesTaskStage.MEET, True, 0),
        _entry(SalesTaskStage.GIVE_INFO, True, 5, name="Saraa"),
        _entry(SalesTaskStage.GIVE_INFO, False, 5),
        _entry(SalesTaskStage.CONTRACT, True, 9),
    ]

    first = progress_to_json(project_progress(logs))
    second = progress_to_json(project_progress(logs))

    assert first == second
    assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)


def test_incremental_recording_matches_replay():
    progress = empty_progress()
    log = []
    for minutes, (stage, completed) in enumerate(
        [("MEET", True), ("MEETING_DATE", True), ("MEET", False), ("CONTRACT", True)]
    ):
        progress, entry = record_stage_event(
            progress, stage, completed, actor=BAT, at=T0 + timedelta(minutes=minutes)
        )
        log.append(entry)

    assert progress_to_json(project_progress(log)) == progress_to_json(progress)
