# app/models/enums/sales_task_stage.py
import enum


class SalesTaskStage(str, enum.Enum):
    # Declaration order is the pipeline order
    MEET = "MEET"
    CONTACT_BY_PHONE = "CONTACT_BY_PHONE"
    MEETING_DATE = "MEETING_DATE"
    GIVE_INFO = "GIVE_INFO"
    CONTRACT = "CONTRACT"
