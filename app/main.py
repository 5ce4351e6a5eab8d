# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes.health import router as health_router
from app.config import build_sqlalchemy_db_url, is_analysis_provider_configured, settings
from app.data.skill_tables import load_skill_tables
from app.database import Base, engine
from app.logging_config import configure_logging
from app import models  # noqa: F401  # register every table on Base.metadata
from app.routers.job_matches import router as job_matches_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        # Keyword tables are immutable and shared by every request.
        app.state.skill_tables = load_skill_tables()
        if not is_analysis_provider_configured(settings):
            logger.info("GEMINI_API_KEY not set; matching runs on local heuristics only")
        yield

    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health endpoints (do not depend on API_PREFIX)
    application.include_router(health_router)
    application.include_router(job_matches_router, prefix=settings.api_prefix)

    # Avoid accidental schema changes in shared MySQL databases.
    # For local/test sqlite usage, auto-create ORM tables is still convenient.
    db_url = build_sqlalchemy_db_url(settings)
    if db_url.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    return application


app = create_app()
