from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from app.dependencies import get_db, get_memory_store
from app.schemas import (
    DeleteResult,
    MessageCreate,
    MessageOut,
    SessionCreate,
    SessionOut,
    SessionRename,
)
from chatbot.core.memory import SessionMemoryStore
from chatbot.storage import repository
from chatbot.storage.repository import (
    InvalidRoleError,
    SessionExistsError,
    SessionNotFoundError,
)


logger = logging.getLogger("chatbot.history")

router = APIRouter(prefix="/history", tags=["history"])


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session {session_id} not found.")


@router.get("/sessions", response_model=List[SessionOut])
def list_sessions(db: Session = Depends(get_db)):
    try:
        sessions = repository.list_sessions(db)
    except Exception as e:
        logger.exception("Error fetching sessions: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch sessions.")
    logger.info("Fetched %s sessions", len(sessions))
    return sessions


@router.get("/{session_id}", response_model=List[MessageOut])
def list_messages(session_id: str, db: Session = Depends(get_db)):
    try:
        return repository.list_messages(db, session_id)
    except Exception as e:
        logger.exception("Error fetching messages for %s: %s", session_id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch messages.")


@router.post("", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
def create_session(body: SessionCreate, db: Session = Depends(get_db)):
    try:
        created = repository.create_session(db, body.name, session_id=body.id)
    except SessionExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        logger.exception("Error creating session: %s", e)
        raise HTTPException(status_code=500, detail="Failed to create session.")
    logger.info("Created session %s (%s)", created.id, created.name)
    return created


@router.patch("/{session_id}", response_model=SessionOut)
def rename_session(session_id: str, body: SessionRename, db: Session = Depends(get_db)):
    try:
        return repository.rename_session(db, session_id, body.name)
    except SessionNotFoundError:
        raise _not_found(session_id)
    except Exception as e:
        logger.exception("Error renaming session %s: %s", session_id, e)
        raise HTTPException(status_code=500, detail="Failed to rename session.")


@router.delete("/{session_id}", response_model=DeleteResult)
def delete_session(
    session_id: str,
    db: Session = Depends(get_db),
    memories: SessionMemoryStore = Depends(get_memory_store),
):
    try:
        repository.delete_session(db, session_id)
    except SessionNotFoundError:
        raise _not_found(session_id)
    except Exception as e:
        logger.exception("Error deleting session %s: %s", session_id, e)
        raise HTTPException(status_code=500, detail="Failed to delete session.")
    memories.discard(session_id)
    logger.info("Deleted session %s", session_id)
    return DeleteResult(success=True)


@router.post(
    "/{session_id}/messages",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
)
def add_message(session_id: str, body: MessageCreate, db: Session = Depends(get_db)):
    try:
        return repository.add_message(db, session_id, body.role, body.content)
    except SessionNotFoundError:
        raise _not_found(session_id)
    except InvalidRoleError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error saving message for %s: %s", session_id, e)
        raise HTTPException(status_code=500, detail="Failed to save message.")
