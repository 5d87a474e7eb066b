# app/constants/activity_codes.py

from enum import Enum


class ActivityCode(str, Enum):
    # ---------------- AUTH ----------------
    LOGIN = "auth.login"
    LOGOUT = "auth.logout"

    # ---------------- USERS ----------------
    CREATE_USER = "user.create"
    UPDATE_USER_ROLE = "user.role.update"
    UPDATE_USER_EMAIL = "user.email.update"
    UPDATE_USER_NAME = "user.name.update"
    UPDATE_USER_PASSWORD = "user.password.update"
    RESET_USER_PASSWORD = "user.password.reset"
    DEACTIVATE_USER = "user.deactivate"
    REACTIVATE_USER = "user.reactivate"
    UPDATE_PROFILE = "user.profile.update"

    # ---------------- QUOTATIONS ----------------
    CREATE_QUOTATION = "quotation.create"
    UPDATE_QUOTATION = "quotation.update"
    UPDATE_QUOTATION_STATUS = "quotation.status.update"
    DELETE_QUOTATION = "quotation.delete"

    # ---------------- SALES TASKS ----------------
    CREATE_SALES_TASK = "sales_task.create"
    UPDATE_SALES_TASK_STATUS = "sales_task.status.update"
    REBUILD_SALES_TASK_PROGRESS = "sales_task.progress.rebuild"
    DELETE_SALES_TASK = "sales_task.delete"

    # ---------------- MASTER DATA ----------------
    CREATE_MASTER_OPTION = "master_option.create"
    UPDATE_MASTER_OPTION = "master_option.update"
    DEACTIVATE_MASTER_OPTION = "master_option.deactivate"

    # ---------------- SETTINGS ----------------
    UPDATE_COMPANY_SETTINGS = "company_settings.update"
