from typing import List, Optional
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from chatbot.storage.models import ROLE_BOT, ROLE_USER, ROLES, ChatSession, Message


class SessionNotFoundError(LookupError):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id!r} not found")
        self.session_id = session_id


class SessionExistsError(ValueError):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id!r} already exists")
        self.session_id = session_id


class InvalidRoleError(ValueError):
    pass


def new_session_id() -> str:
    return uuid4().hex


def count_sessions(db: Session) -> int:
    return db.exec(select(func.count()).select_from(ChatSession)).one()


def next_session_name(db: Session) -> str:
    """
    Default display name for a session nobody has named yet.
    """
    return f"Chat {count_sessions(db) + 1}"


def create_session(db: Session, name: str, session_id: Optional[str] = None) -> ChatSession:
    """
    Insert a new session. A missing id is generated.
    """
    session_id = session_id or new_session_id()
    if db.get(ChatSession, session_id) is not None:
        raise SessionExistsError(session_id)

    chat_session = ChatSession(id=session_id, name=name)
    db.add(chat_session)
    db.commit()
    db.refresh(chat_session)
    return chat_session


def get_session(db: Session, session_id: str) -> Optional[ChatSession]:
    return db.get(ChatSession, session_id)


def require_session(db: Session, session_id: str) -> ChatSession:
    chat_session = db.get(ChatSession, session_id)
    if chat_session is None:
        raise SessionNotFoundError(session_id)
    return chat_session


def list_sessions(db: Session) -> List[ChatSession]:
    """
    Return all sessions, newest first.
    """
    return list(
        db.exec(
            select(ChatSession).order_by(ChatSession.created_at.desc(), ChatSession.id)
        ).all()
    )


def rename_session(db: Session, session_id: str, name: str) -> ChatSession:
    chat_session = require_session(db, session_id)
    chat_session.name = name
    db.add(chat_session)
    db.commit()
    db.refresh(chat_session)
    return chat_session


def delete_session(db: Session, session_id: str) -> None:
    """
    Delete a session together with its messages.
    """
    chat_session = require_session(db, session_id)
    db.delete(chat_session)
    db.commit()


def add_message(db: Session, session_id: str, role: str, content: str) -> Message:
    if role not in ROLES:
        raise InvalidRoleError(f"Unknown role {role!r}; expected one of {', '.join(ROLES)}")
    require_session(db, session_id)

    msg = Message(session_id=session_id, role=role, content=content)
    db.add(msg)
    db.commit()
    db.refresh(msg)
    return msg


def list_messages(db: Session, session_id: str, limit: Optional[int] = None) -> List[Message]:
    """
    Return messages of a session ordered oldest -> newest.

    With ``limit`` only the most recent ``limit`` messages are returned,
    still oldest first.
    """
    if limit is not None:
        recent = db.exec(
            select(Message)
            .where(Message.session_id == session_id)
            .order_by(Message.timestamp.desc(), Message.id.desc())
            .limit(limit)
        ).all()
        return list(reversed(recent))

    return list(
        db.exec(
            select(Message)
            .where(Message.session_id == session_id)
            .order_by(Message.timestamp, Message.id)
        ).all()
    )


def get_history(db: Session, session_id: str, limit: Optional[int] = None) -> List[dict]:
    """
    Conversation turns as plain dicts for the chat engine.
    """
    return [
        {"role": m.role, "content": m.content}
        for m in list_messages(db, session_id, limit=limit)
    ]


def _insert_exchange(
    db: Session, session_id: str, user_text: str, bot_text: str, create_session: bool
) -> List[Message]:
    if create_session:
        db.add(ChatSession(id=session_id, name=next_session_name(db)))
    msgs = [
        Message(session_id=session_id, role=ROLE_USER, content=user_text),
        Message(session_id=session_id, role=ROLE_BOT, content=bot_text),
    ]
    db.add_all(msgs)
    db.commit()
    for msg in msgs:
        db.refresh(msg)
    return msgs


def record_exchange(db: Session, session_id: str, user_text: str, bot_text: str) -> List[Message]:
    """
    Store one user turn and its reply in a single transaction.

    A missing session is created with a default name. If another request
    creates it first, the turns are stored against the existing row.
    """
    missing = get_session(db, session_id) is None
    try:
        return _insert_exchange(db, session_id, user_text, bot_text, create_session=missing)
    except IntegrityError:
        db.rollback()
        if not missing:
            raise
    return _insert_exchange(db, session_id, user_text, bot_text, create_session=False)
