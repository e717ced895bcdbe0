"""Per-session conversation memory.

Each chat session gets a LangChain ``CombinedMemory`` holding the raw recent
turns (``chat_history``) and a running summary (``summary``) produced by a
separate summary model. Memories live in process and are created on first use.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, Optional, Tuple

from langchain.memory import (
    CombinedMemory,
    ConversationBufferMemory,
    ConversationSummaryMemory,
)
from langchain_core.language_models import BaseLanguageModel
from langchain_core.messages import BaseMessage


HISTORY_KEY = "chat_history"
SUMMARY_KEY = "summary"
INPUT_KEY = "input"
OUTPUT_KEY = "output"


def build_memory(summary_llm: BaseLanguageModel) -> CombinedMemory:
    buffer = ConversationBufferMemory(
        return_messages=True,
        memory_key=HISTORY_KEY,
        input_key=INPUT_KEY,
    )
    summary = ConversationSummaryMemory(
        llm=summary_llm,
        memory_key=SUMMARY_KEY,
        return_messages=False,
        input_key=INPUT_KEY,
    )
    return CombinedMemory(memories=[buffer, summary])


def seed_memory(memory: CombinedMemory, messages: Iterable[BaseMessage]) -> None:
    """Preload the buffer of a fresh memory with already persisted turns."""
    for child in memory.memories:
        if isinstance(child, ConversationBufferMemory):
            child.chat_memory.add_messages(list(messages))
            return


class SessionMemoryStore:
    """Mapping from session id to its conversation memory."""

    def __init__(self) -> None:
        self._memories: Dict[str, CombinedMemory] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[CombinedMemory]:
        return self._memories.get(session_id)

    def get_or_create(
        self,
        session_id: str,
        summary_llm: BaseLanguageModel,
        seed: Optional[Iterable[BaseMessage]] = None,
    ) -> Tuple[CombinedMemory, bool]:
        """Return the session memory and whether it was created by this call.

        ``seed`` only applies to a new memory. It is loaded before the memory
        becomes visible to other callers.
        """
        with self._lock:
            memory = self._memories.get(session_id)
            if memory is not None:
                return memory, False
            memory = build_memory(summary_llm)
            if seed is not None:
                seed_memory(memory, seed)
            self._memories[session_id] = memory
            return memory, True

    def discard(self, session_id: str) -> bool:
        with self._lock:
            return self._memories.pop(session_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._memories.clear()

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._memories

    def __len__(self) -> int:
        return len(self._memories)
