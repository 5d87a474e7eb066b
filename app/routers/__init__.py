# app/routers/__init__.py

from .users.user_router import router as user_router

from .auth.auth_router import router as auth_router
from .auth.activity_router import router as activity_router

from .sales.sales_task_router import router as sales_task_router
from .quotations.quotation_router import router as quotation_router
from .dashboard.dashboard_router import router as dashboard_router
from .reports.quotation_report_router import router as quotation_report_router

from .masters.master_option_router import router as master_option_router
from .masters.master_option_router import lookup_router

from .settings.company_router import router as company_router


__all__ = [
"user_router",

"auth_router",
"activity_router",

"sales_task_router",
"quotation_router",
"dashboard_router",
"quotation_report_router",

"master_option_router",
"lookup_router",

"company_router",
]
