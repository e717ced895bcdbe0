from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from config.settings import get_settings


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine, sharing one connection for in-memory SQLite."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    engine = create_engine(url, echo=echo, **kwargs)

    # SQLite leaves foreign keys off unless asked per connection.
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


settings = get_settings()
engine = build_engine(settings.database_url, echo=settings.database_echo)


def init_db(bind: Engine = engine):
    """Create all tables if they don't exist."""
    # registers the tables on SQLModel.metadata
    from chatbot.storage import models  # noqa: F401

    SQLModel.metadata.create_all(bind)


def get_session(bind: Engine = engine) -> Session:
    """Provide a new SQLModel session."""
    return Session(bind)
