from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv


load_dotenv()

DEV_ENVIRONMENTS = {"dev", "development", "local", "test"}
DEV_CORS_ORIGINS = ["http://localhost:5173", "http://localhost:3000"]


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here.
    """

    def __init__(self) -> None:
        self.app_env: str = os.getenv("APP_ENV", "development")
        self.llm_provider: str = os.getenv("LLM_PROVIDER", "gemini").strip().lower()

        self.google_api_key: Optional[str] = os.getenv("GOOGLE_API_KEY")
        self.gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
        self.openai_api_key: Optional[str] = os.getenv("OPENAI_API_KEY")
        self.openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4")

        self.temperature: float = float(os.getenv("MODEL_TEMPERATURE", "0.7"))
        self.top_p: float = float(os.getenv("MODEL_TOP_P", "0.9"))
        self.summary_temperature: float = float(os.getenv("SUMMARY_TEMPERATURE", "0"))
        self.history_seed_limit: int = int(os.getenv("HISTORY_SEED_LIMIT", "20"))

        self.database_url: str = os.getenv("DATABASE_URL", "sqlite:///./chatbot.db")
        self.database_echo: bool = _env_bool("DATABASE_ECHO")

        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("PORT", "3001"))
        self.api_base_url: str = os.getenv("CHAT_API_URL", "http://127.0.0.1:3001")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        self._cors_origins = _env_list("CORS_ORIGINS")

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() in DEV_ENVIRONMENTS

    @property
    def cors_origins(self) -> List[str]:
        if self._cors_origins:
            return self._cors_origins
        if self.is_development:
            return list(DEV_CORS_ORIGINS)
        return []


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
