import logging
import time
from typing import Optional

from firebase_admin import auth, exceptions as firebase_exceptions
from jose import jwt

from app.config import settings
from app.core.errors import InvalidArgumentError, NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)

STREAM_JWT_ALGORITHM = "HS256"

def create_stream_token(user_id: str, issued_at: Optional[int] = None) -> str:
    """
    Sign a Stream Chat user token.

    Args:
        user_id: The Stream user ID, same as the Firebase uid
        issued_at: Unix timestamp the token is issued at, defaults to now

    Returns:
        str: HS256 JWT valid for ``settings.stream_token_ttl_seconds``
    """
    if issued_at is None:
        issued_at = int(time.time())
    payload = {
        "user_id": user_id,
        "iat": issued_at,
        "exp": issued_at + settings.stream_token_ttl_seconds,
    }
    return jwt.encode(payload, settings.stream_api_secret.get_secret_value(), algorithm=STREAM_JWT_ALGORITHM)

def issue_stream_token(user_id: Optional[str], current_user: dict) -> str:
    """
    Issue a Stream token for the authenticated caller.

    Raises:
        InvalidArgumentError: userId missing
        PermissionDeniedError: userId is not the caller
        NotFoundError: No Firebase Auth account for userId
    """
    if not user_id:
        raise InvalidArgumentError("userId is required")
    if current_user["uid"] != user_id:
        raise PermissionDeniedError("Can only generate tokens for authenticated user")

    try:
        auth.get_user(user_id)
    except auth.UserNotFoundError:
        raise NotFoundError("User not found")
    except (firebase_exceptions.FirebaseError, ValueError) as e:
        logger.warning(f"Could not look up Firebase user {user_id}: {e}")
        raise NotFoundError("User not found")

    token = create_stream_token(user_id)
    logger.info(f"Generated Stream token for user: {user_id}")
    return token
