import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .common import app, get_current_user
from .core.errors import NotFoundError
from .init_db import get_db
from .routers.auth.endpoints import router as AuthEndpoints
from .routers.llm.endpoints import router as LLMEndpoints
from .routers.stream.endpoints import router as StreamEndpoints
from .routers.users.friends.endpoints import router as FriendsEndpoints
from .schemas.friends import FriendProfileResponse
from .services.user_service import get_user_by_id

logger = logging.getLogger(__name__)

# Include routers
app.include_router(AuthEndpoints)
app.include_router(StreamEndpoints)
app.include_router(FriendsEndpoints)
app.include_router(LLMEndpoints)

@app.get("/me", response_model=FriendProfileResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    user = await get_user_by_id(db, current_user["uid"])
    if user is None:
        raise NotFoundError("User not found in database")
    return user

@app.get("/health")
async def health():
    return {"status": "ok"}
