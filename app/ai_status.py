"""AI service status checking."""

import time
from typing import Any, Dict, Optional

import openai

from .config import Settings

# Cache status for 30 seconds to avoid excessive API calls
_status_cache: Optional[Dict[str, Any]] = None
_cache_timestamp: float = 0
CACHE_TTL = 30.0  # seconds


def get_ai_status(settings: Settings) -> Dict[str, Any]:
    """Check AI service availability and return status info."""
    global _status_cache, _cache_timestamp

    # Return cached status if still valid
    if _status_cache and (time.time() - _cache_timestamp) < CACHE_TTL:
        return _status_cache

    status = {
        "available": False,
        "reason": "",
        "enabled": settings.enable_ai_summary,
        "api_key_set": False,
        "model": settings.ai_model,
    }

    if not settings.enable_ai_summary:
        status["reason"] = "ENABLE_AI_SUMMARY is off"
        return status

    key = settings.openai_api_key
    if not key:
        status["reason"] = "OPENAI_API_KEY not set"
        return status

    status["api_key_set"] = True

    if len(key) < 10:
        status["reason"] = "OPENAI_API_KEY appears invalid (too short)"
        return status

    if key.startswith("your_api_key") or key == "your_api_key_here":
        status["reason"] = "OPENAI_API_KEY not configured (still using placeholder)"
        return status

    # Actually test the API key with a minimal request
    try:
        client = openai.OpenAI(api_key=key, base_url=settings.openai_base_url)
        client.chat.completions.create(
            model=settings.ai_model,
            messages=[{"role": "user", "content": "test"}],
            max_tokens=1,
            timeout=5.0,
        )
        status["available"] = True
        status["reason"] = "AI features available"
    except openai.AuthenticationError:
        status["reason"] = "OPENAI_API_KEY is invalid or expired"
    except openai.APITimeoutError:
        status["reason"] = "API request timed out (check network)"
    except openai.OpenAIError as e:
        status["reason"] = f"API test failed: {str(e)[:100]}"

    # Cache the result
    _status_cache = status
    _cache_timestamp = time.time()

    return status
