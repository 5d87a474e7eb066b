# app/constants/error_codes.py

from enum import Enum


class ErrorCode(str, Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # ---------------- USERS ----------------
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_EMAIL_EXISTS = "USER_EMAIL_EXISTS"
    USER_ROLE_INVALID = "USER_ROLE_INVALID"
    USER_VERSION_CONFLICT = "USER_VERSION_CONFLICT"

    # ---------------- QUOTATIONS ----------------
    QUOTATION_NOT_FOUND = "QUOTATION_NOT_FOUND"
    QUOTATION_NUMBER_CONFLICT = "QUOTATION_NUMBER_CONFLICT"
    QUOTATION_VERSION_CONFLICT = "QUOTATION_VERSION_CONFLICT"

    # ---------------- SALES TASKS ----------------
    SALES_TASK_NOT_FOUND = "SALES_TASK_NOT_FOUND"
    SALES_TASK_INVALID_STAGE = "SALES_TASK_INVALID_STAGE"
    SALES_TASK_ACTOR_REQUIRED = "SALES_TASK_ACTOR_REQUIRED"
    SALES_TASK_VERSION_CONFLICT = "SALES_TASK_VERSION_CONFLICT"

    # ---------------- MASTER DATA ----------------
    MASTER_OPTION_NOT_FOUND = "MASTER_OPTION_NOT_FOUND"
    MASTER_CATEGORY_INVALID = "MASTER_CATEGORY_INVALID"
    MASTER_OPTION_LOCKED = "MASTER_OPTION_LOCKED"

    # ---------------- SETTINGS ----------------
    COMPANY_TRANSLATION_REQUIRED = "COMPANY_TRANSLATION_REQUIRED"

    # ---------------- DASHBOARD ----------------
    DASHBOARD_RANGE_INVALID = "DASHBOARD_RANGE_INVALID"
