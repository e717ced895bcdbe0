from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Text
from sqlmodel import Field, Relationship, SQLModel


ROLE_USER = "user"
ROLE_BOT = "bot"
ROLES = (ROLE_USER, ROLE_BOT)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatSession(SQLModel, table=True):
    """
    Named conversation thread. Deleting it deletes its messages.
    """
    __tablename__ = "sessions"

    id: str = Field(primary_key=True, max_length=128)
    name: str = Field(max_length=256)
    created_at: datetime = Field(default_factory=utcnow, index=True)

    messages: List["Message"] = Relationship(
        back_populates="session",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class Message(SQLModel, table=True):
    """
    Single turn of a session.
    """
    __tablename__ = "messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: str = Field(foreign_key="sessions.id", index=True, ondelete="CASCADE")
    role: str = Field(max_length=16)  # "user" or "bot"
    content: str = Field(sa_type=Text)
    timestamp: datetime = Field(default_factory=utcnow, index=True)

    session: Optional[ChatSession] = Relationship(back_populates="messages")
