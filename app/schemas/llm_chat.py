from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional

class Sender(str, Enum):
    me = "me"
    them = "them"


class ChatTurn(BaseModel):
    sender: Sender
    content: str


class SuggestRepliesRequest(BaseModel):
    messages: List[ChatTurn] = Field(min_length=1)
    count: int = Field(default=3, ge=1, le=5)
    tone: Optional[str] = None


class SuggestRepliesResponse(BaseModel):
    suggestions: List[str]


class TranslateRequest(BaseModel):
    text: str = Field(min_length=1)
    target_language: str = Field(alias="targetLanguage")
    source_language: Optional[str] = Field(default=None, alias="sourceLanguage")

    class Config:
        populate_by_name = True


class TranslateResponse(BaseModel):
    translation: str
