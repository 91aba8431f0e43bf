"""Startup validation and configuration checks."""

import logging
from pathlib import Path

from .config import Settings

logger = logging.getLogger(__name__)


def validate_config(settings: Settings) -> None:
    """Validate config at startup and warn if .env or OPENAI_API_KEY missing."""
    env_exists = Path(".env").exists()
    if not env_exists:
        logger.warning(".env file not found; using process environment only.")
    if not settings.enable_ai_summary:
        logger.info("ENABLE_AI_SUMMARY is off. Reports will not include summaries.")
    elif not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set. AI summaries will be disabled.")
    if settings.very_high_complexity_threshold < settings.complexity_threshold:
        logger.warning(
            "VERY_HIGH_COMPLEXITY_THRESHOLD (%d) is below COMPLEXITY_THRESHOLD (%d)",
            settings.very_high_complexity_threshold,
            settings.complexity_threshold,
        )
