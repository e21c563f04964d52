from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Core/runtime
    db_path: str
    run_env: str
    log_level: str

    # AI gating
    ai_enabled: bool
    ai_provider: str  # gemini | openai

    gemini_api_key: str | None
    gemini_model: str
    openai_api_key: str | None
    openai_model: str

    # Timeouts (seconds) for the bounded wait on the text-generation collaborator
    enhance_timeout_seconds: float
    icebreaker_timeout_seconds: float

    # Profiles
    avatar_placeholder_url: str = "https://ui-avatars.com/api/"

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging/tracing
    llm_trace: bool = False
    llm_log_path: str = "logs/llm_calls.jsonl"

    def api_key_for(self, provider: str) -> str | None:
        if provider == "gemini":
            return self.gemini_api_key
        if provider == "openai":
            return self.openai_api_key
        return None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    ai_provider = os.getenv("AI_PROVIDER", "gemini").strip().lower()
    if ai_provider not in ("gemini", "openai"):
        raise RuntimeError(f"Unsupported AI_PROVIDER: {ai_provider} (expected gemini or openai)")
    return Settings(
        db_path=os.getenv("DB_PATH", "connectai.db"),
        run_env=os.getenv("RUN_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        ai_enabled=_as_bool(os.getenv("AI_ENABLED"), default=True),
        ai_provider=ai_provider,
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-3-flash-preview"),
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        enhance_timeout_seconds=float(os.getenv("ENHANCE_TIMEOUT_SECONDS", "6")),
        icebreaker_timeout_seconds=float(os.getenv("ICEBREAKER_TIMEOUT_SECONDS", "8")),
        avatar_placeholder_url=os.getenv("AVATAR_PLACEHOLDER_URL", "https://ui-avatars.com/api/"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        llm_trace=_as_bool(os.getenv("LLM_TRACE")),
        llm_log_path=os.getenv("LLM_LOG_PATH", "logs/llm_calls.jsonl"),
    )
