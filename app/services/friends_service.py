import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.friendship import FriendAction, RelationshipStore, resolve_target_id, run_friend_action
from app.core.friendship.snapshot import id_set
from app.core.errors import InvalidArgumentError
from app.schemas.friends import (
    CancelFriendRequest,
    FriendActionResponse,
    FriendProfileResponse,
    FriendRequestsResponse,
    FriendRequestType,
    FriendStatusResponse,
    RespondFriendRequest,
    SendFriendRequest,
)
from app.services.user_service import get_user_by_id, get_users_by_ids

# Configure logging for this module
logger = logging.getLogger(__name__)

async def _run(action: FriendAction, db: AsyncSession, current_user: dict, target_id: str) -> FriendActionResponse:
    decision = await run_friend_action(db, action, current_user["uid"], target_id)
    return FriendActionResponse(success=True, status=decision.status)

def _explicit_uid(value: str, field_name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidArgumentError(f"{field_name} is required")
    return value

async def send_friend_request(
    request: SendFriendRequest, db: AsyncSession, current_user: dict
) -> FriendActionResponse:
    """
    Send a friend request to another user, by id or by email.

    Sending to someone who already has a pending request towards the caller
    makes the two users friends straight away.

    Args:
        request: SendFriendRequest with targetId or targetEmail
        db: AsyncSession for database operations
        current_user: Dictionary containing current user information

    Returns:
        FriendActionResponse: sent, already_sent, already_friends or auto_accepted

    Raises:
        InvalidArgumentError: No target given
        NotFoundError: Target has no account
        FailedPreconditionError: Target is the caller
    """
    target_id = await resolve_target_id(db, request.target_id, request.target_email)
    return await _run(FriendAction.SEND, db, current_user, target_id)

async def accept_friend_request(
    request: RespondFriendRequest, db: AsyncSession, current_user: dict
) -> FriendActionResponse:
    """
    Accept a pending request from ``fromUid``.

    Accepting a request that is no longer pending is a successful no-op.
    """
    target_id = _explicit_uid(request.from_uid, "fromUid")
    return await _run(FriendAction.ACCEPT, db, current_user, target_id)

async def decline_friend_request(
    request: RespondFriendRequest, db: AsyncSession, current_user: dict
) -> FriendActionResponse:
    target_id = _explicit_uid(request.from_uid, "fromUid")
    return await _run(FriendAction.DECLINE, db, current_user, target_id)

async def cancel_friend_request(
    request: CancelFriendRequest, db: AsyncSession, current_user: dict
) -> FriendActionResponse:
    target_id = _explicit_uid(request.to_uid, "toUid")
    return await _run(FriendAction.CANCEL, db, current_user, target_id)

async def remove_friend(
    friend_id: str, db: AsyncSession, current_user: dict
) -> FriendActionResponse:
    """
    Remove a friendship between the current user and another user.

    Any pending request between the two is dropped as well. Removing someone
    who is not a friend succeeds without changes.
    """
    target_id = _explicit_uid(friend_id, "friend_id")
    return await _run(FriendAction.REMOVE, db, current_user, target_id)

async def get_friend_status(
    user_id: str, db: AsyncSession, current_user: dict
) -> FriendStatusResponse:
    """
    Get the relationship between the current user and another user.

    Args:
        user_id: ID of the user to check status with
        db: AsyncSession for database operations
        current_user: Dictionary containing current user information

    Returns:
        FriendStatusResponse: friendship and pending request flags
    """
    store = RelationshipStore(db)
    me, _ = await store.read_pair(current_user["uid"], user_id)
    return FriendStatusResponse(
        is_friend=user_id in me.friends,
        request_sent=user_id in me.requests_sent,
        request_received=user_id in me.requests_received,
    )

async def get_friends(db: AsyncSession, current_user: dict) -> List[FriendProfileResponse]:
    user = await get_user_by_id(db, current_user["uid"])
    if user is None:
        return []
    friends = await get_users_by_ids(db, sorted(id_set(user.friends)))
    return [FriendProfileResponse.model_validate(friend) for friend in friends]

async def get_friend_requests(
    request_type: FriendRequestType, db: AsyncSession, current_user: dict
) -> FriendRequestsResponse:
    """
    Retrieve pending friend requests (sent, received, or all).

    Args:
        request_type: Which side of the pending requests to return
        db: AsyncSession for database operations
        current_user: Dictionary containing current user information

    Returns:
        FriendRequestsResponse: profiles of the users on the other end
    """
    response = FriendRequestsResponse()
    user = await get_user_by_id(db, current_user["uid"])
    if user is None:
        return response

    if request_type in (FriendRequestType.SENT, FriendRequestType.ALL):
        sent = await get_users_by_ids(db, sorted(id_set(user.requests_sent)))
        response.sent = [FriendProfileResponse.model_validate(u) for u in sent]
    if request_type in (FriendRequestType.RECEIVED, FriendRequestType.ALL):
        received = await get_users_by_ids(db, sorted(id_set(user.requests_received)))
        response.received = [FriendProfileResponse.model_validate(u) for u in received]
    return response
