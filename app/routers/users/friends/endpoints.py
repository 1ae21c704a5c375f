import logging
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.init_db import get_db
from app.common import get_current_user
from app.core.errors import AppError, InternalError
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
from app.services.friends_service import (
    accept_friend_request,
    cancel_friend_request,
    decline_friend_request,
    get_friend_requests,
    get_friend_status,
    get_friends,
    remove_friend,
    send_friend_request,
)

# Configure logging for this module
logger = logging.getLogger(__name__)

# Initialize router with prefix and tags for API documentation
router = APIRouter(prefix="/friends", tags=["friends"])

@router.post("/request", response_model=FriendActionResponse)
async def send_friend_request_api(
    request: SendFriendRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Send a friend request to another user, identified by id or email.

    Args:
        request: SendFriendRequest with targetId or targetEmail
        db: Database session
        current_user: Currently authenticated user

    Returns:
        FriendActionResponse: success flag and outcome status
    """
    try:
        return await send_friend_request(request, db, current_user)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error sending friend request: {str(e)}")
        raise InternalError()

@router.post("/accept", response_model=FriendActionResponse)
async def accept_friend_request_api(
    request: RespondFriendRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Accept a friend request received from ``fromUid``.

    Returns:
        FriendActionResponse: ``accepted``, or ``no_op`` when nothing was pending
    """
    try:
        return await accept_friend_request(request, db, current_user)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error accepting friend request: {str(e)}")
        raise InternalError()

@router.post("/decline", response_model=FriendActionResponse)
async def decline_friend_request_api(
    request: RespondFriendRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    try:
        return await decline_friend_request(request, db, current_user)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error declining friend request: {str(e)}")
        raise InternalError()

@router.post("/cancel", response_model=FriendActionResponse)
async def cancel_friend_request_api(
    request: CancelFriendRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    try:
        return await cancel_friend_request(request, db, current_user)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error cancelling friend request: {str(e)}")
        raise InternalError()

@router.get("/requests", response_model=FriendRequestsResponse)
async def get_friend_requests_api(
    request_type: FriendRequestType = FriendRequestType.ALL,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Retrieve pending friend requests for the current user.

    Args:
        request_type: Type of requests to retrieve (ALL, SENT, RECEIVED)
        db: Database session
        current_user: Currently authenticated user

    Returns:
        FriendRequestsResponse: Profiles on the other end of each pending request
    """
    try:
        return await get_friend_requests(request_type, db, current_user)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error retrieving friend requests: {str(e)}")
        raise InternalError()

@router.get("/status/{user_id}", response_model=FriendStatusResponse)
async def get_friend_status_api(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    try:
        return await get_friend_status(user_id, db, current_user)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error retrieving friend status: {str(e)}")
        raise InternalError()

@router.get("/list", response_model=List[FriendProfileResponse])
async def get_friends_api(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Get the list of all friends for the current user.
    """
    try:
        return await get_friends(db, current_user)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error retrieving friends: {str(e)}")
        raise InternalError()

@router.delete("/{friend_id}", response_model=FriendActionResponse)
async def remove_friend_api(
    friend_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Remove a friend from the current user's friend list.

    Args:
        friend_id: ID of the friend to remove
        db: Database session
        current_user: Currently authenticated user

    Returns:
        FriendActionResponse: always ``removed`` on success
    """
    try:
        return await remove_friend(friend_id, db, current_user)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error removing friend: {str(e)}")
        raise InternalError()
