"""Configuration from environment."""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _get_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        return default


def _get_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_openai_api_key() -> str:
    """API key for the assessment model (optional; enrichment is skipped without it)."""
    return os.environ.get("OPENAI_API_KEY", "").strip()


def get_openai_base_url() -> Optional[str]:
    """OpenAI-compatible endpoint. None means the library default."""
    return os.environ.get("OPENAI_BASE_URL", "").strip() or None


def get_ai_model() -> str:
    """Assessment model. Default: gpt-4o-mini."""
    return os.environ.get("AI_MODEL", "gpt-4o-mini").strip()


def get_host() -> str:
    return os.environ.get("HOST", "0.0.0.0").strip()


def get_port() -> int:
    return _get_int("PORT", 8000)


def get_allowed_origins() -> List[str]:
    raw = os.environ.get("ALLOWED_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper()


def get_max_file_size_mb() -> int:
    return _get_int("MAX_FILE_SIZE_MB", 10)


def get_analysis_timeout_ms() -> int:
    """Upper bound for one enrichment call."""
    return _get_int("ANALYSIS_TIMEOUT_MS", 30000)


def get_debounce_ms() -> int:
    return _get_int("DEBOUNCE_MS", 2000)


def get_enable_ai_summary() -> bool:
    return _get_bool("ENABLE_AI_SUMMARY", True)


def get_complexity_threshold() -> int:
    return _get_int("COMPLEXITY_THRESHOLD", 10)


def get_very_high_complexity_threshold() -> int:
    return _get_int("VERY_HIGH_COMPLEXITY_THRESHOLD", 15)


@dataclass
class Settings:
    """Explicit configuration handed to the services at startup."""

    openai_api_key: str = ""
    openai_base_url: Optional[str] = None
    ai_model: str = "gpt-4o-mini"
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    max_file_size_mb: int = 10
    analysis_timeout_ms: int = 30000
    debounce_ms: int = 2000
    enable_ai_summary: bool = True
    complexity_threshold: int = 10
    very_high_complexity_threshold: int = 15

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def ai_enabled(self) -> bool:
        return self.enable_ai_summary and bool(self.openai_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openai_api_key=get_openai_api_key(),
            openai_base_url=get_openai_base_url(),
            ai_model=get_ai_model(),
            host=get_host(),
            port=get_port(),
            allowed_origins=get_allowed_origins(),
            log_level=get_log_level(),
            max_file_size_mb=get_max_file_size_mb(),
            analysis_timeout_ms=get_analysis_timeout_ms(),
            debounce_ms=get_debounce_ms(),
            enable_ai_summary=get_enable_ai_summary(),
            complexity_threshold=get_complexity_threshold(),
            very_high_complexity_threshold=get_very_high_complexity_threshold(),
        )
