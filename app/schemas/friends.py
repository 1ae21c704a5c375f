from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum as PyEnum

from app.core.friendship import DecisionStatus

class SendFriendRequest(BaseModel):
    target_id: Optional[str] = Field(default=None, alias="targetId")
    target_email: Optional[str] = Field(default=None, alias="targetEmail")

    class Config:
        populate_by_name = True

class RespondFriendRequest(BaseModel):
    from_uid: str = Field(alias="fromUid")

    class Config:
        populate_by_name = True

class CancelFriendRequest(BaseModel):
    to_uid: str = Field(alias="toUid")

    class Config:
        populate_by_name = True

class FriendActionResponse(BaseModel):
    success: bool = True
    status: DecisionStatus

class FriendRequestType(str, PyEnum):
    SENT = "sent"
    RECEIVED = "received"
    ALL = "all"

class FriendProfileResponse(BaseModel):
    id: str
    display_name: Optional[str] = Field(default=None, alias="displayName")
    email: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoURL")

    class Config:
        from_attributes = True
        populate_by_name = True

class FriendRequestsResponse(BaseModel):
    sent: List[FriendProfileResponse] = []
    received: List[FriendProfileResponse] = []

class FriendStatusResponse(BaseModel):
    is_friend: bool = Field(alias="isFriend")
    request_sent: bool = Field(alias="requestSent")
    request_received: bool = Field(alias="requestReceived")

    class Config:
        populate_by_name = True
