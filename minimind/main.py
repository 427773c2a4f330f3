"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from minimind.config import get_settings
from minimind.api.v1.router import api_router
from minimind.api.v1.billing import webhook_router
from minimind.services.rate_limiter import build_anonymous_limiter

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    logger.info("Starting %s (env=%s)", settings.app_name, settings.environment)
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; generation endpoints will fail")
    yield
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(
        title=settings.app_name,
        description="Plan-gated explanations, stories, bedtime stories and learning answers for kids",
        version="0.1.0",
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.anonymous_limiter = build_anonymous_limiter(settings)
    app.include_router(api_router, prefix=settings.api_v1_prefix)
    app.include_router(webhook_router)  # POST /webhooks/stripe (no auth)
    return app


app = create_app()
