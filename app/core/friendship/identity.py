import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidArgumentError, NotFoundError
from app.models import User

logger = logging.getLogger(__name__)


async def resolve_target_id(
    db: AsyncSession,
    target_id: Optional[str] = None,
    target_email: Optional[str] = None,
) -> str:
    """
    Map a caller-supplied target to a canonical user id.

    An explicit id wins and is returned trimmed without a lookup. Otherwise the
    email is looked up against the unique email index.

    Raises:
        InvalidArgumentError: Neither form was supplied
        NotFoundError: No user has that email
    """
    target_id = (target_id or "").strip()
    if target_id:
        return target_id

    target_email = (target_email or "").strip()
    if not target_email:
        raise InvalidArgumentError("targetId or targetEmail is required")

    result = await db.execute(select(User.id).where(User.email == target_email))
    user_id = result.scalar_one_or_none()
    if user_id is None:
        logger.info("No user matches the requested email")
        raise NotFoundError("No user found with that email")
    return user_id
