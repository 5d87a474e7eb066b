#users and auth
from app.models.users.user_models import User, RefreshToken
from app.models.support.activity_models import UserActivity

# Sales
from app.models.sales.sales_task_models import SalesTask, SalesTaskStatusLog

# Quotations
from app.models.quotations.quotation_models import Quotation

# Masters
from app.models.masters.master_option_models import MasterOption

# Settings
from app.models.settings.company_models import CompanyProfile, CompanyProfileTranslation
