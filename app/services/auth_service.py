import asyncio
import logging

from firebase_admin import auth
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidArgumentError
from app.schemas.users import CreateCustomTokenRequest, CustomTokenResponse
from app.services.user_service import upsert_user_profile

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("uid", "display_name", "email")

async def create_custom_token(request: CreateCustomTokenRequest, db: AsyncSession) -> CustomTokenResponse:
    """
    Mint a Firebase custom token and record the user's profile.

    The token carries displayName and email as developer claims, plus photoURL
    when one is given.

    Args:
        request: CreateCustomTokenRequest with uid, displayName, email, photoURL
        db: AsyncSession for the profile upsert

    Returns:
        CustomTokenResponse: the custom token and uid

    Raises:
        InvalidArgumentError: A required field is missing or blank
    """
    for field_name in REQUIRED_FIELDS:
        if not (getattr(request, field_name) or "").strip():
            alias = CreateCustomTokenRequest.model_fields[field_name].alias or field_name
            raise InvalidArgumentError(f"Missing required field: {alias}")

    claims = {
        "displayName": request.display_name,
        "email": request.email,
    }
    if request.photo_url:
        claims["photoURL"] = request.photo_url

    token = await asyncio.to_thread(auth.create_custom_token, request.uid, claims)
    if isinstance(token, bytes):
        token = token.decode("utf-8")

    await upsert_user_profile(
        db,
        uid=request.uid,
        display_name=request.display_name,
        email=request.email,
        photo_url=request.photo_url,
    )

    return CustomTokenResponse(token=token, uid=request.uid)
