"""Route handlers."""

from .analyze import router as analyze_router
from .health import router as health_router
from .languages import router as languages_router
from .realtime import router as realtime_router

__all__ = ["analyze_router", "health_router", "languages_router", "realtime_router"]
