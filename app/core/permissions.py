# app/core/permissions.py

from enum import Enum


class AppRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MANAGER = "manager"
    SALES = "sales"
    USER = "user"
    UNKNOWN = "unknown"


ASSIGNABLE_ROLES = {r.value for r in AppRole if r is not AppRole.UNKNOWN}

_STAFF = {AppRole.SUPER_ADMIN, AppRole.ADMIN, AppRole.MANAGER}

PERMISSION_MATRIX: dict[str, set[AppRole]] = {
    "view_users": _STAFF,
    "manage_users": _STAFF,
    "manage_company_settings": _STAFF,
    "access_reports": _STAFF,
    "access_master_data": _STAFF,
    "access_quotations": _STAFF | {AppRole.SALES, AppRole.USER},
    "access_sales_tasks": _STAFF | {AppRole.SALES},
    "access_dashboard": _STAFF | {AppRole.SALES, AppRole.USER},
    "view_all_quotations": _STAFF,
    "manage_quotations": _STAFF | {AppRole.SALES},
    "view_all_sales_tasks": _STAFF,
    "manage_sales_tasks": _STAFF | {AppRole.SALES},
}


def normalize_role(role: str | None) -> AppRole:
    if not role:
        return AppRole.UNKNOWN
    try:
        return AppRole(role.strip().lower())
    except ValueError:
        return AppRole.UNKNOWN


def has_permission(role: str | None, permission: str) -> bool:
    normalized = normalize_role(role)
    if normalized is AppRole.SUPER_ADMIN:
        return True
    return normalized in PERMISSION_MATRIX.get(permission, set())


def is_admin_role(role: str | None) -> bool:
    return normalize_role(role) in {AppRole.SUPER_ADMIN, AppRole.ADMIN}
