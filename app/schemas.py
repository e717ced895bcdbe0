from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Wire models use camelCase names; Python code uses snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ChatRequest(ApiModel):
    message: str = Field(..., min_length=1, description="User's latest message")
    session_id: str = Field(..., min_length=1, max_length=128, description="Session the message belongs to")


class ChatResponse(ApiModel):
    reply: str


class SessionCreate(ApiModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = Field(default=None, max_length=128, description="Generated when omitted")
    name: str = Field(..., min_length=1, max_length=256)


class SessionRename(ApiModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=256)


class MessageCreate(ApiModel):
    role: Literal["user", "bot"]
    content: str = Field(..., min_length=1)


class SessionOut(ApiModel):
    id: str
    name: str
    created_at: datetime


class MessageOut(ApiModel):
    id: int
    session_id: str
    role: str
    content: str
    timestamp: datetime


class DeleteResult(ApiModel):
    success: bool
