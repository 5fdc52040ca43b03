"""FastAPI application for the site builder service."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.api.deps import Services, create_services
from src.api.routes import router
from src.config import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure the root logger once for the process."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the shared service handles at startup and release them at shutdown."""
    if getattr(app.state, "services", None) is None:
        app.state.services = create_services()
        logger.info("Services started")

    settings: Settings = app.state.services.settings
    if settings.artifact_backend == "local":
        Path(settings.artifact_dir).mkdir(parents=True, exist_ok=True)

    yield

    services: Services = app.state.services
    await services.aclose()
    logger.info("Services stopped")


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Prebuilt services container; opened from settings at startup otherwise

    Returns:
        Configured FastAPI app
    """
    settings = services.settings if services is not None else get_settings()
    configure_logging(settings)

    app = FastAPI(title="Site Builder API", lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    # Generated PDFs are published at /jobs/<job_id>.pdf; the directory is created at startup
    if settings.artifact_backend == "local":
        app.mount(
            "/jobs",
            StaticFiles(directory=settings.artifact_dir, check_dir=False),
            name="jobs",
        )

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("src.main:app", host="0.0.0.0", port=3000, reload=True)
