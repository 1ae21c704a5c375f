import asyncio
import logging
from fastapi import APIRouter, Depends
from app.common import get_current_user
from app.config import settings
from app.core.errors import AppError, InternalError
from app.schemas.users import StreamTokenRequest, StreamTokenResponse
from app.services.stream_service import issue_stream_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stream", tags=["stream"])

@router.post("/token", response_model=StreamTokenResponse)
async def generate_stream_token(
    request: StreamTokenRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Generate a Stream Chat token for the authenticated user.

    Args:
        request: StreamTokenRequest with the userId to sign for
        current_user: Currently authenticated user

    Returns:
        StreamTokenResponse: the signed token and userId
    """
    try:
        token = await asyncio.to_thread(issue_stream_token, request.user_id, current_user)
        return StreamTokenResponse(token=token, user_id=request.user_id, api_key=settings.stream_api_key)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error generating Stream token: {str(e)}")
        raise InternalError()
