from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.core.db import session_scope
from app.services.auth.auth_service import purge_stale_refresh_tokens

scheduler = AsyncIOScheduler(timezone="UTC")


@scheduler.scheduled_job("cron", hour=0, minute=5, id="purge_refresh_tokens")  # daily at 00:05
async def purge_refresh_tokens_job():
    async with session_scope() as db:
        await purge_stale_refresh_tokens(db)
