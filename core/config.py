"""
Application settings.

Values come from environment variables (a local .env file is loaded first).
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str] = None
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.5
    llm_max_tokens: int = 1000
    llm_max_function_steps: int = 2     # search -> act
    chat_history_limit: int = 6
    catalog_path: Path = PROJECT_ROOT / "data" / "products.json"
    storage_dir: Optional[Path] = None  # None = in-memory cart/coupon storage
    search_result_limit: int = 8
    max_sessions: int = 1000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        storage_dir = os.getenv("STORAGE_DIR")
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            llm_model=os.getenv("LLM_MODEL", cls.llm_model),
            llm_temperature=float(os.getenv("LLM_TEMPERATURE", cls.llm_temperature)),
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", cls.llm_max_tokens)),
            llm_max_function_steps=int(os.getenv("LLM_MAX_FUNCTION_STEPS", cls.llm_max_function_steps)),
            chat_history_limit=int(os.getenv("CHAT_HISTORY_LIMIT", cls.chat_history_limit)),
            catalog_path=Path(os.getenv("CATALOG_PATH", str(cls.catalog_path))),
            storage_dir=Path(storage_dir) if storage_dir else None,
            search_result_limit=int(os.getenv("SEARCH_RESULT_LIMIT", cls.search_result_limit)),
            max_sessions=int(os.getenv("MAX_SESSIONS", cls.max_sessions)),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
