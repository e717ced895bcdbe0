from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from app.dependencies import get_db, get_engine
from app.schemas import ChatRequest, ChatResponse
from chatbot.engine import ChatEngine
from chatbot.storage import repository
from config.settings import get_settings


logger = logging.getLogger("chatbot.chat")

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
def chat(
    req: ChatRequest,
    db: Session = Depends(get_db),
    engine: ChatEngine = Depends(get_engine),
) -> ChatResponse:
    settings = get_settings()
    logger.info(
        "Incoming chat: session_id=%s message_len=%s",
        req.session_id,
        len(req.message),
    )
    try:
        history = repository.get_history(db, req.session_id, limit=settings.history_seed_limit)
        reply = engine.get_response(req.message, req.session_id, history=history)
    except Exception as e:
        logger.exception("Chat processing failed: %s", e)
        raise HTTPException(status_code=500, detail="Internal server error")

    try:
        repository.record_exchange(db, req.session_id, req.message, reply)
    except Exception as e:
        db.rollback()
        # memory now holds a turn the database does not; rebuild it from storage next time
        engine.forget(req.session_id)
        logger.exception("Saving chat turn failed for %s: %s", req.session_id, e)
        raise HTTPException(status_code=500, detail="Internal server error")

    logger.info("Model responded with %s chars", len(reply))
    return ChatResponse(reply=reply)
