import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LLM_PROVIDER", "gemini")

import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models import FakeListChatModel
from sqlmodel import Session

from app.dependencies import get_db, get_engine, get_memory_store
from app.main import app
from chatbot.core.memory import SessionMemoryStore
from chatbot.engine import ChatEngine
from chatbot.storage.db import build_engine, init_db


@pytest.fixture
def db_engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def memory_store():
    return SessionMemoryStore()


@pytest.fixture
def chat_engine(memory_store):
    return ChatEngine(
        chat_model=FakeListChatModel(responses=["Hello from the bot", "Second reply"]),
        summary_model=FakeListChatModel(responses=["The user greeted the bot."]),
        store=memory_store,
        history_limit=20,
    )


@pytest.fixture
def client(db_engine, chat_engine, memory_store):
    def override_db():
        with Session(db_engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_engine] = lambda: chat_engine
    app.dependency_overrides[get_memory_store] = lambda: memory_store
    yield TestClient(app)
    app.dependency_overrides.clear()
