import pytest
from sqlmodel import Session, select

from chatbot.storage import repository
from chatbot.storage.models import Message


def test_create_and_get_session(db):
    created = repository.create_session(db, "Chat 1", session_id="abc")
    assert repository.get_session(db, "abc").name == "Chat 1"
    assert created.created_at is not None


def test_duplicate_session_id_rejected(db):
    repository.create_session(db, "Chat 1", session_id="abc")
    with pytest.raises(repository.SessionExistsError):
        repository.create_session(db, "Other", session_id="abc")


def test_next_session_name_counts_existing(db):
    assert repository.next_session_name(db) == "Chat 1"
    repository.create_session(db, "whatever")
    repository.create_session(db, "whatever else")
    assert repository.next_session_name(db) == "Chat 3"


def test_rename_and_delete_unknown_session(db):
    with pytest.raises(repository.SessionNotFoundError):
        repository.rename_session(db, "nope", "x")
    with pytest.raises(repository.SessionNotFoundError):
        repository.delete_session(db, "nope")


def test_add_message_validates_role_and_session(db):
    repository.create_session(db, "Chat 1", session_id="abc")
    with pytest.raises(repository.InvalidRoleError):
        repository.add_message(db, "abc", "assistant", "hi")
    with pytest.raises(repository.SessionNotFoundError):
        repository.add_message(db, "missing", "user", "hi")


def test_list_messages_limit_keeps_most_recent_in_order(db):
    repository.create_session(db, "Chat 1", session_id="abc")
    for i in range(5):
        repository.add_message(db, "abc", "user" if i % 2 == 0 else "bot", f"m{i}")

    assert [m.content for m in repository.list_messages(db, "abc")] == ["m0", "m1", "m2", "m3", "m4"]
    assert [m.content for m in repository.list_messages(db, "abc", limit=2)] == ["m3", "m4"]
    assert repository.get_history(db, "abc", limit=1) == [{"role": "user", "content": "m4"}]


def test_delete_session_cascades_to_messages(db):
    repository.create_session(db, "Chat 1", session_id="abc")
    repository.add_message(db, "abc", "user", "hello")
    repository.add_message(db, "abc", "bot", "hi")

    repository.delete_session(db, "abc")

    assert repository.get_session(db, "abc") is None
    assert db.exec(select(Message)).all() == []


def test_record_exchange_creates_session_and_both_turns(db):
    user_msg, bot_msg = repository.record_exchange(db, "new", "hi", "hello")

    assert repository.get_session(db, "new").name == "Chat 1"
    assert (user_msg.role, bot_msg.role) == ("user", "bot")
    assert [m.content for m in repository.list_messages(db, "new")] == ["hi", "hello"]


def test_record_exchange_is_all_or_nothing(db, monkeypatch):
    def refuse_commit():
        db.flush()
        raise RuntimeError("commit failed")

    monkeypatch.setattr(db, "commit", refuse_commit)
    with pytest.raises(RuntimeError):
        repository.record_exchange(db, "new", "hi", "hello")
    monkeypatch.undo()
    db.rollback()

    assert repository.get_session(db, "new") is None
    assert db.exec(select(Message)).all() == []


def test_record_exchange_when_session_created_concurrently(db, db_engine, monkeypatch):
    with Session(db_engine) as other:
        repository.create_session(other, "Made elsewhere", session_id="race")
    # the existence check ran before the other request committed
    monkeypatch.setattr(repository, "get_session", lambda _db, _id: None)

    repository.record_exchange(db, "race", "hi", "hello")
    monkeypatch.undo()

    assert repository.get_session(db, "race").name == "Made elsewhere"
    assert [m.role for m in repository.list_messages(db, "race")] == ["user", "bot"]
