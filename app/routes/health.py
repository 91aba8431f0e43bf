"""Health check route."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..ai_status import get_ai_status
from ..config import Settings
from ..services import RealtimePipeline
from ..utils import get_pipeline, get_settings

router = APIRouter(prefix="/api")


@router.get("/health")
def health(
    settings: Settings = Depends(get_settings),
    pipeline: RealtimePipeline = Depends(get_pipeline),
) -> dict:
    """Liveness plus watcher and AI status."""
    watcher_ok = pipeline.healthy
    return {
        "status": "ok" if watcher_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "model": settings.ai_model,
        "watcher": {
            "healthy": watcher_ok,
            "watchedPaths": len(pipeline.watched_paths()),
        },
        "ai": get_ai_status(settings),
    }
