import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.config import settings
from app.core.errors import InternalError
from app.core.friendship.transaction import CONFLICT_ERRORS, TransactionConflictError
from app.models import User

logger = logging.getLogger(__name__)

async def get_user_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
    """
    Retrieve a user by their unique identifier.

    Args:
        db: AsyncSession - Database session for executing queries
        user_id: str - Unique identifier of the user

    Returns:
        Optional[User]: User object if found, None otherwise
    """
    query = select(User).where(User.id == user_id)
    result = await db.execute(query)
    return result.scalar_one_or_none()

async def get_users_by_ids(db: AsyncSession, user_ids: List[str]) -> List[User]:
    if not user_ids:
        return []
    result = await db.execute(select(User).where(User.id.in_(user_ids)).order_by(User.id))
    return list(result.scalars().all())

async def _upsert_once(
    db: AsyncSession,
    uid: str,
    display_name: str,
    email: str,
    photo_url: str,
) -> User:
    now = datetime.now(timezone.utc)
    user = await get_user_by_id(db, uid)
    if user is None:
        user = User(
            id=uid,
            email=email,
            display_name=display_name,
            photo_url=photo_url,
            created_at=now,
            updated_at=now,
            last_login_at=now,
        )
        db.add(user)
        created = True
    else:
        user.display_name = display_name
        user.photo_url = photo_url
        user.last_login_at = now
        user.updated_at = now
        created = False

    try:
        await db.commit()
    except CONFLICT_ERRORS as e:
        await db.rollback()
        raise TransactionConflictError(str(e)) from e

    logger.info(f"{'Created new' if created else 'Updated existing'} user profile for: {uid}")
    await db.refresh(user)
    return user

async def upsert_user_profile(
    db: AsyncSession,
    uid: str,
    display_name: str,
    email: str,
    photo_url: str = "",
) -> User:
    """
    Create the profile row on first sign-in, refresh it on later ones.

    Existing rows keep their email; only the display name, photo and login
    timestamps are refreshed. The row is versioned, so a friend action or a
    second sign-in committing in between makes the attempt start over from a
    fresh read.

    Raises:
        InternalError: Conflicts persisted past the retry limit
    """
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(TransactionConflictError),
        stop=stop_after_attempt(settings.friendship_max_attempts),
        wait=wait_exponential(multiplier=0.05, max=settings.friendship_retry_max_wait),
        reraise=True,
    )
    try:
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(f"Retrying profile upsert for {uid} (attempt {attempt.retry_state.attempt_number})")
                user = await _upsert_once(db, uid, display_name, email, photo_url)
    except TransactionConflictError as e:
        logger.error(f"Gave up on profile upsert for {uid} after repeated conflicts: {e}")
        raise InternalError("Could not update the profile, please try again") from e
    return user
