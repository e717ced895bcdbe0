import json

import httpx
import pytest

from app.cli import run_repl
from chatbot.client import ChatApiClient, ChatClientError


def _client(handler):
    return ChatApiClient(base_url="http://chat.test", transport=httpx.MockTransport(handler))


def test_send_message_posts_camel_case_body():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"reply": "pong"})

    with _client(handler) as client:
        assert client.send_message("ping", "s-1") == "pong"

    assert seen == {"path": "/chat", "body": {"message": "ping", "sessionId": "s-1"}}


def test_send_message_server_error():
    def handler(request):
        return httpx.Response(500, json={"detail": "Internal server error"})

    with _client(handler) as client:
        with pytest.raises(ChatClientError, match=r"Failed to get AI response: Server error: 500"):
            client.send_message("ping", "s-1")


def test_send_message_without_reply():
    with _client(lambda request: httpx.Response(200, json={})) as client:
        with pytest.raises(ChatClientError, match="No reply received"):
            client.send_message("ping", "s-1")


def test_send_message_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(ChatClientError, match="connection refused"):
            client.send_message("ping", "s-1")


def test_session_calls_hit_history_routes():
    calls = []

    def handler(request):
        calls.append((request.method, request.url.path))
        if request.method == "DELETE":
            return httpx.Response(200, json={"success": True})
        if request.method == "GET":
            return httpx.Response(200, json=[])
        return httpx.Response(201, json={"id": "new", "name": "n"})

    with _client(handler) as client:
        assert client.create_session("n")["id"] == "new"
        client.rename_session("new", "m")
        assert client.list_sessions() == []
        assert client.get_messages("new") == []
        assert client.delete_session("new") is True

    assert calls == [
        ("POST", "/history"),
        ("PATCH", "/history/new"),
        ("GET", "/history/sessions"),
        ("GET", "/history/new"),
        ("DELETE", "/history/new"),
    ]


class FakeClient:
    def __init__(self, fail_on=None):
        self.sent = []
        self.fail_on = fail_on

    def send_message(self, message, session_id):
        if message == self.fail_on:
            raise ChatClientError("Failed to get AI response: Server error: 500")
        self.sent.append((message, session_id))
        return f"echo {message}"


def test_repl_sends_lines_until_exit():
    lines = iter(["hello", "   ", "broken", "EXIT", "never sent"])
    output = []
    client = FakeClient(fail_on="broken")

    code = run_repl(client, "s-1", read=lambda _prompt: next(lines), write=output.append)

    assert code == 0
    assert client.sent == [("hello", "s-1")]
    assert output == [
        "echo hello",
        "Error: Failed to get AI response: Server error: 500",
        "Goodbye!",
    ]


def test_repl_stops_on_eof():
    def read(_prompt):
        raise EOFError

    output = []
    assert run_repl(FakeClient(), "s-1", read=read, write=output.append) == 0
    assert output == ["", "Goodbye!"]
