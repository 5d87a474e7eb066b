from sqlalchemy.ext.asyncio import AsyncSession
from app.models.support.activity_models import UserActivity
from app.constants.activity_templates import ACTIVITY_TEMPLATES
from app.constants.activity_codes import ActivityCode


def actor_context(user) -> dict:
    """Template keys every activity message starts with."""
    return {
        "actor_role": (user.role or "unknown").capitalize(),
        "actor_email": user.username,
    }


async def emit_activity(
    db: AsyncSession,
    *,
    user_id: int | None,
    username: str,
    code: ActivityCode,
    resource: str | None = None,
    resource_id: int | str | None = None,
    **context,
):
    template = ACTIVITY_TEMPLATES.get(code)
    if not template:
        raise ValueError(f"No activity template for code {code}")

    try:
        message = template.format(**context)
    except KeyError as e:
        raise ValueError(
            f"Missing activity context key: {e.args[0]} for {code}"
        )

    db.add(
        UserActivity(
            user_id=user_id,
            username_snapshot=username,
            action=code.value,
            resource=resource,
            resource_id=str(resource_id) if resource_id is not None else None,
            message=message,
        )
    )
