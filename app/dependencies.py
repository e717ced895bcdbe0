from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterator

from fastapi import HTTPException
from sqlmodel import Session

from chatbot.core.memory import SessionMemoryStore
from chatbot.engine import ChatEngine
from chatbot.storage.db import get_session
from config.settings import get_settings


logger = logging.getLogger("chatbot")


def get_db() -> Iterator[Session]:
    with get_session() as db:
        yield db


@lru_cache(maxsize=1)
def get_memory_store() -> SessionMemoryStore:
    return SessionMemoryStore()


@lru_cache(maxsize=1)
def _build_engine() -> ChatEngine:
    return ChatEngine.from_settings(get_settings(), store=get_memory_store())


def get_engine() -> ChatEngine:
    try:
        return _build_engine()
    except RuntimeError as exc:
        logger.error("Chat engine unavailable: %s", exc)
        raise HTTPException(status_code=500, detail="LLM provider is not configured")
