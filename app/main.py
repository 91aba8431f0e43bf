"""FastAPI app: analysis endpoints, realtime watch control and the /ws channel."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from code_quality_checker.main_checker import AnalysisEngine
from code_quality_checker.settings import AnalysisSettings

from .config import Settings, get_host, get_port
from .errors import CheckerError
from .logging_config import setup_logging
from .routes import analyze_router, health_router, languages_router, realtime_router
from .services import AssessmentService, BroadcastChannel, CheckerService, RealtimePipeline
from .startup import validate_config

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AnalysisEngine:
    analysis_settings = AnalysisSettings(
        complexity_threshold=settings.complexity_threshold,
        very_high_complexity_threshold=max(
            settings.very_high_complexity_threshold, settings.complexity_threshold
        ),
    )
    assessor = AssessmentService(settings) if settings.ai_enabled else None
    return AnalysisEngine(
        settings=analysis_settings,
        assessor=assessor,
        enrichment_timeout=settings.analysis_timeout_ms / 1000.0,
    )


def create_app(settings: Optional[Settings] = None, engine: Optional[AnalysisEngine] = None) -> FastAPI:
    """Build the application with its services attached to `app.state`."""
    settings = settings or Settings.from_env()
    engine = engine or build_engine(settings)
    checker = CheckerService(engine, settings.max_file_size_bytes)
    channel = BroadcastChannel()
    pipeline = RealtimePipeline(checker, channel, debounce_seconds=settings.debounce_ms / 1000.0)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        validate_config(settings)
        pipeline.start()
        logger.info("Code quality checker API ready")
        try:
            yield
        finally:
            await pipeline.shutdown()

    app = FastAPI(
        title="Code Quality Checker API",
        description="Rule-based code analysis with scoring, optional AI summaries and realtime file watching.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.checker = checker
    app.state.channel = channel
    app.state.pipeline = pipeline

    @app.exception_handler(CheckerError)
    async def _checker_error(request: Request, exc: CheckerError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    app.include_router(analyze_router)
    app.include_router(realtime_router)
    app.include_router(languages_router)
    app.include_router(health_router)
    return app


setup_logging(Settings.from_env().log_level)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=get_host(), port=get_port())
