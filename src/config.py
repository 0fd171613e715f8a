# src/config.py
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

# Закрытый словарь исполнителей, который вырезается из заголовка задачи
DEFAULT_OWNER_NAMES: Tuple[str, ...] = ("阿伟", "choco", "05")


def _split_names(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return DEFAULT_OWNER_NAMES
    names = tuple(n.strip() for n in raw.split(",") if n.strip())
    return names or DEFAULT_OWNER_NAMES


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime settings of the parser; hybrid mode is off without an API key."""

    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_base_url: Optional[str] = None
    llm_timeout_seconds: float = 8.0
    llm_cache_ttl_seconds: float = 300.0
    owner_names: Tuple[str, ...] = field(default=DEFAULT_OWNER_NAMES)
    timezone: str = "Asia/Shanghai"
    log_level: str = "INFO"

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openai_api_key)


def load_settings() -> Settings:
    """Собирает Settings из окружения (.env уже подгружен при импорте)."""
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
        openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
        llm_timeout_seconds=_float_env("LLM_TIMEOUT_SECONDS", 8.0),
        llm_cache_ttl_seconds=_float_env("LLM_CACHE_TTL_SECONDS", 300.0),
        owner_names=_split_names(os.getenv("OWNER_NAMES")),
        timezone=os.getenv("TIMEZONE", "Asia/Shanghai"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
