import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.common import verify_internal_secret
from app.core.errors import AppError, InternalError
from app.init_db import get_db
from app.schemas.users import CreateCustomTokenRequest, CustomTokenResponse
from app.services.auth_service import create_custom_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/custom-token", response_model=CustomTokenResponse, dependencies=[Depends(verify_internal_secret)])
async def create_custom_token_api(
    request: CreateCustomTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a Firebase custom token and store or refresh the user's profile.

    Args:
        request: uid, displayName and email, optionally photoURL
        db: Database session

    Returns:
        CustomTokenResponse: the custom token and uid
    """
    try:
        return await create_custom_token(request, db)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error creating custom token: {str(e)}")
        raise InternalError("Failed to create custom token")
