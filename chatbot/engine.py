from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from chatbot.core.memory import (
    HISTORY_KEY,
    INPUT_KEY,
    OUTPUT_KEY,
    SessionMemoryStore,
)
from chatbot.core.prompt import SYSTEM_PROMPT
from config.settings import Settings


logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("gemini", "openai")


def build_llm(settings: Settings, temperature: float) -> BaseChatModel:
    provider = settings.llm_provider
    if provider == "gemini":
        if not settings.google_api_key:
            raise RuntimeError(
                "GOOGLE_API_KEY not set. Please configure it in environment or .env"
            )
        return ChatGoogleGenerativeAI(
            model=settings.gemini_model,
            google_api_key=settings.google_api_key,
            temperature=temperature,
            top_p=settings.top_p,
        )
    if provider == "openai":
        if not settings.openai_api_key:
            raise RuntimeError(
                "OPENAI_API_KEY not set. Please configure it in environment or .env"
            )
        return ChatOpenAI(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            temperature=temperature,
        )
    raise RuntimeError(
        f"Unsupported LLM_PROVIDER {provider!r}; expected one of {', '.join(SUPPORTED_PROVIDERS)}"
    )


def build_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages(
        [
            ("system", SYSTEM_PROMPT),
            MessagesPlaceholder(HISTORY_KEY, optional=True),
            ("human", "{input}"),
        ]
    )


def to_lc_messages(history: Sequence[Dict], limit: Optional[int] = None) -> List[BaseMessage]:
    items = list(history or [])
    if limit is not None:
        items = items[-limit:] if limit > 0 else []
    messages: List[BaseMessage] = []
    for item in items:
        role = (item.get("role") or "").lower()
        content = item.get("content") or ""
        if not content:
            continue
        if role in ("user", "human"):
            messages.append(HumanMessage(content=content))
        elif role in ("bot", "assistant", "ai"):
            messages.append(AIMessage(content=content))
        else:
            messages.append(HumanMessage(content=content))
    return messages


class ChatEngine:
    """Answers chat turns with per-session memory of prior turns and a summary."""

    def __init__(
        self,
        chat_model: BaseChatModel,
        summary_model: BaseChatModel,
        store: Optional[SessionMemoryStore] = None,
        history_limit: Optional[int] = None,
    ) -> None:
        self.chat_model = chat_model
        self.summary_model = summary_model
        self.store = store if store is not None else SessionMemoryStore()
        self.history_limit = history_limit
        self.chain = build_prompt() | chat_model | StrOutputParser()

    @classmethod
    def from_settings(
        cls, settings: Settings, store: Optional[SessionMemoryStore] = None
    ) -> "ChatEngine":
        return cls(
            chat_model=build_llm(settings, settings.temperature),
            summary_model=build_llm(settings, settings.summary_temperature),
            store=store,
            history_limit=settings.history_seed_limit,
        )

    def get_response(
        self,
        text: str,
        session_id: str,
        history: Optional[Sequence[Dict]] = None,
    ) -> str:
        """Generate a reply for ``text`` and remember the exchange.

        ``history`` holds persisted turns (dicts with ``role`` and ``content``)
        and is only used to seed a memory that did not exist yet.
        """
        seed = to_lc_messages(history, self.history_limit) if history else None
        memory, created = self.store.get_or_create(session_id, self.summary_model, seed=seed)
        if created and seed:
            logger.info("Seeded memory for session %s with %s messages", session_id, len(seed))

        memory_vars = memory.load_memory_variables({})
        result = self.chain.invoke({INPUT_KEY: text, **memory_vars})
        memory.save_context({INPUT_KEY: text}, {OUTPUT_KEY: result})
        return result

    def forget(self, session_id: str) -> bool:
        return self.store.discard(session_id)
