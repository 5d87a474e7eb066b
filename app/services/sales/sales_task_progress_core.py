# app/services/sales/sales_task_progress_core.py
"""
Stage progress for sales tasks.

Every stage change is an immutable ``StatusLogEntry``. A task's ``progress``
is a projection of its log: for each stage, the latest entry touching that
stage decides whether it is completed and by whom. The task's overall status
is derived from the projection and never set directly.

Nothing in this module touches the database; callers load the log, call
these functions and persist the returned entry together with the new
projection in one transaction.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.enums.sales_task_stage import SalesTaskStage

SALES_TASK_STAGE_ORDER: tuple[SalesTaskStage, ...] = tuple(SalesTaskStage)

STAGE_INDEX = {stage: index for index, stage in enumerate(SALES_TASK_STAGE_ORDER)}


class StageProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    completed: bool = False
    completed_at: Optional[datetime] = None
    completed_by_name: Optional[str] = None
    completed_by_email: Optional[str] = None


class StageActor(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_attributable(self) -> bool:
        return bool((self.name or "").strip() or (self.email or "").strip())


class StatusLogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    status: SalesTaskStage
    completed: bool
    comment: Optional[str] = None
    created_by_id: Optional[int] = None
    created_by_name: Optional[str] = None
    created_by_email: Optional[str] = None
    created_at: datetime


SalesTaskProgress = dict[SalesTaskStage, StageProgress]


# =====================================================
# STAGES
# =====================================================
def parse_stage(raw: Any) -> SalesTaskStage:
    if isinstance(raw, SalesTaskStage):
        return raw
    try:
        return SalesTaskStage(str(raw or "").strip().upper())
    except ValueError:
        raise AppException(
            400,
            f"Invalid sales task stage: {raw}",
            ErrorCode.SALES_TASK_INVALID_STAGE,
            {"allowed": [s.value for s in SALES_TASK_STAGE_ORDER]},
        )


# =====================================================
# PROJECTION SHAPE
# =====================================================
def empty_progress() -> SalesTaskProgress:
    return {stage: StageProgress() for stage in SALES_TASK_STAGE_ORDER}


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def ensure_progress(raw: Any) -> SalesTaskProgress:
    """Coerce a stored JSON projection into a total stage mapping."""
    progress = empty_progress()
    if not isinstance(raw, dict):
        return progress

    for stage in SALES_TASK_STAGE_ORDER:
        record = raw.get(stage.value)
        if not isinstance(record, dict):
            continue

        completed = record.get("completed") is True
        if not completed:
            continue

        completed_at = _parse_timestamp(record.get("completed_at"))
        if completed_at is None:
            # a completion without a timestamp cannot be trusted
            continue

        progress[stage] = StageProgress(
            completed=True,
            completed_at=completed_at,
            completed_by_name=_optional_str(record.get("completed_by_name")),
            completed_by_email=_optional_str(record.get("completed_by_email")),
        )

    return progress


def progress_to_json(progress: SalesTaskProgress) -> dict[str, dict]:
    return {
        stage.value: progress[stage].model_dump(mode="json")
        for stage in SALES_TASK_STAGE_ORDER
    }


def resolve_overall_status(progress: SalesTaskProgress) -> SalesTaskStage:
    for stage in reversed(SALES_TASK_STAGE_ORDER):
        if progress[stage].completed:
            return stage

    for stage in SALES_TASK_STAGE_ORDER:
        if not progress[stage].completed:
            return stage

    return SALES_TASK_STAGE_ORDER[0]


# =====================================================
# EVENTS
# =====================================================
def build_stage_event(
    stage: Any,
    completed: bool,
    actor: Optional[StageActor] = None,
    comment: Optional[str] = None,
    at: Optional[datetime] = None,
) -> StatusLogEntry:
    stage = parse_stage(stage)

    if completed and (actor is None or not actor.is_attributable):
        raise AppException(
            400,
            "Completing a stage requires an actor name or email",
            ErrorCode.SALES_TASK_ACTOR_REQUIRED,
        )

    return StatusLogEntry(
        status=stage,
        completed=completed,
        comment=comment or None,
        created_by_id=actor.user_id if actor else None,
        created_by_name=actor.name if actor else None,
        created_by_email=actor.email if actor else None,
        created_at=at or datetime.now(timezone.utc),
    )


def apply_stage_event(
    progress: SalesTaskProgress,
    entry: StatusLogEntry,
) -> SalesTaskProgress:
    next_progress = dict(progress)

    if entry.completed:
        next_progress[entry.status] = StageProgress(
            completed=True,
            completed_at=entry.created_at,
            completed_by_name=entry.created_by_name,
            completed_by_email=entry.created_by_email,
        )
    else:
        next_progress[entry.status] = StageProgress()

    return next_progress


def record_stage_event(
    progress: SalesTaskProgress,
    stage: Any,
    completed: bool,
    actor: Optional[StageActor] = None,
    comment: Optional[str] = None,
    at: Optional[datetime] = None,
) -> tuple[SalesTaskProgress, StatusLogEntry]:
    entry = build_stage_event(stage, completed, actor=actor, comment=comment, at=at)
    return apply_stage_event(progress, entry), entry


def project_progress(logs: Iterable[StatusLogEntry]) -> SalesTaskProgress:
    # sorted() is stable, so same-timestamp entries keep insertion order
    ordered = sorted(logs, key=lambda entry: entry.created_at)

    progress = empty_progress()
    for entry in ordered:
        progress = apply_stage_event(progress, entry)
    return progress
