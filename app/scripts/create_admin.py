import asyncio

from app.core.config import ADMIN_EMAIL, ADMIN_NAME, ADMIN_PASSWORD, APP_ENV
from app.core.db import session_scope, init_models
from app.core.logging import setup_logging
from app.services.users.user_services import ensure_admin
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def create_admin():
    if APP_ENV == "development":
        await init_models()

    async with session_scope() as session:
        user, created = await ensure_admin(
            session,
            email=ADMIN_EMAIL,
            password=ADMIN_PASSWORD,
            name=ADMIN_NAME,
        )

    if created:
        logger.info("Admin user created", extra={"email": user.username})
    else:
        logger.info("Admin user already exists", extra={"email": user.username})


if __name__ == "__main__":
    setup_logging()
    asyncio.run(create_admin())
