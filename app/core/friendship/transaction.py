import logging

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.config import settings
from app.core.errors import FailedPreconditionError, InternalError
from app.core.friendship.state_machine import Decision, FriendAction, decide
from app.core.friendship.store import RelationshipStore

logger = logging.getLogger(__name__)

# Another transaction committed to one of the two rows between our read and
# our write, or raced us to insert the same row.
CONFLICT_ERRORS = (StaleDataError, IntegrityError, OperationalError)


class TransactionConflictError(Exception):
    """Raised when an attempt lost a write race and has to start over."""


async def _attempt(db: AsyncSession, action: FriendAction, actor_id: str, target_id: str) -> Decision:
    store = RelationshipStore(db)
    try:
        actor, other = await store.read_pair(actor_id, target_id)
        decision = decide(action, actor, other)
        if decision.rejection is not None:
            await db.rollback()
            raise decision.rejection
        if decision.has_writes:
            await store.write_pair(actor_id, decision.actor_delta, target_id, decision.other_delta)
        await db.commit()
    except CONFLICT_ERRORS as e:
        await db.rollback()
        raise TransactionConflictError(str(e)) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"Store failure during {action.value} {actor_id} -> {target_id}")
        raise InternalError() from e
    return decision


async def run_friend_action(
    db: AsyncSession,
    action: FriendAction,
    actor_id: str,
    target_id: str,
) -> Decision:
    """
    Run one relationship action as an atomic read-decide-write unit.

    Both users' rows are read, the state machine decides, and both deltas are
    committed together. A lost write race rolls back and starts over from a
    fresh read, up to ``settings.friendship_max_attempts`` times.

    Args:
        db: Session owning the transaction
        action: Relationship action requested by the actor
        actor_id: Authenticated caller
        target_id: Already-resolved counterpart

    Returns:
        Decision: The committed decision

    Raises:
        FailedPreconditionError: actor and target are the same user
        NotFoundError: The counterpart has no account (send / accept)
        InternalError: Retries exhausted or the store failed
    """
    if actor_id == target_id:
        raise FailedPreconditionError("You cannot do this with yourself")

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
                    logger.warning(
                        f"Retrying {action.value} {actor_id} -> {target_id} "
                        f"(attempt {attempt.retry_state.attempt_number})"
                    )
                decision = await _attempt(db, action, actor_id, target_id)
    except TransactionConflictError as e:
        logger.error(f"Gave up on {action.value} {actor_id} -> {target_id} after repeated conflicts: {e}")
        raise InternalError("Could not complete the request, please try again") from e

    logger.info(f"{action.value} {actor_id} -> {target_id}: {decision.status.value}")
    return decision
