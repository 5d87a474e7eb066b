from fastapi import Depends

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.core.permissions import has_permission
from app.utils.get_user import get_current_user
from app.models.users.user_models import User
from app.utils.logger import get_logger

logger = get_logger("auth.guard")


def require_permission(permission: str):
    async def permission_checker(user: User = Depends(get_current_user)):
        if not has_permission(user.role, permission):
            logger.warning(
                "Permission denied",
                extra={"user_id": user.id, "role": user.role, "permission": permission},
            )
            raise AppException(403, "Permission denied", ErrorCode.PERMISSION_DENIED)
        return user
    return permission_checker
