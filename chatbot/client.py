from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from config.settings import get_settings


class ChatClientError(RuntimeError):
    pass


class ChatReply(BaseModel):
    reply: str = Field(..., min_length=1)


def _describe_error(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        detail = ""
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("detail"):
            detail = f" ({body['detail']})"
        return f"Server error: {exc.response.status_code}{detail}"
    return str(exc) or exc.__class__.__name__


class ChatApiClient:
    """Small httpx client for the chat and history endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or get_settings().api_base_url).rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ChatApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, action: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise ChatClientError(f"Failed to {action}: {_describe_error(exc)}") from exc
        except ValueError as exc:
            raise ChatClientError(f"Failed to {action}: invalid JSON response") from exc

    def send_message(self, message: str, session_id: str) -> str:
        data = self._request(
            "POST",
            "/chat",
            "get AI response",
            json={"message": message, "sessionId": session_id},
        )
        try:
            return ChatReply.model_validate(data).reply
        except ValidationError as exc:
            raise ChatClientError(
                "Failed to get AI response: No reply received from AI service"
            ) from exc

    def list_sessions(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/history/sessions", "fetch sessions")

    def get_messages(self, session_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/history/{session_id}", "fetch messages")

    def create_session(self, name: str, session_id: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": name}
        if session_id:
            payload["id"] = session_id
        return self._request("POST", "/history", "create session", json=payload)

    def rename_session(self, session_id: str, name: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/history/{session_id}", "rename session", json={"name": name})

    def delete_session(self, session_id: str) -> bool:
        data = self._request("DELETE", f"/history/{session_id}", "delete session")
        return bool(data.get("success"))
