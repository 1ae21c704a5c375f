from pydantic import BaseModel, Field
from typing import Optional

class CreateCustomTokenRequest(BaseModel):
    uid: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    email: Optional[str] = None
    photo_url: str = Field(default="", alias="photoURL")

    class Config:
        populate_by_name = True

class CustomTokenResponse(BaseModel):
    token: str
    uid: str
    success: bool = True

class StreamTokenRequest(BaseModel):
    user_id: Optional[str] = Field(default=None, alias="userId")

    class Config:
        populate_by_name = True

class StreamTokenResponse(BaseModel):
    token: str
    user_id: str = Field(alias="userId")
    api_key: str = Field(alias="apiKey")
    success: bool = True

    class Config:
        populate_by_name = True
