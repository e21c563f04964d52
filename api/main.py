from __future__ import annotations

import threading
from typing import Optional

from fastapi import APIRouter, FastAPI

from api.endpoints.enrichment import router as enrichment_router
from api.endpoints.profiles import router as profiles_router
from api.errors import install_error_handlers
from config.settings import Settings, get_settings
from db.connection import get_connection
from ports.llm import TextGenerationPort
from services.directory import Directory
from utils.logging_setup import init_logging


api_router = APIRouter(prefix="/api")


@api_router.get("/health", summary="Simple readiness probe")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


api_router.include_router(enrichment_router)
api_router.include_router(profiles_router)


def create_app(
    settings: Optional[Settings] = None,
    directory: Optional[Directory] = None,
    client: Optional[TextGenerationPort] = None,
) -> FastAPI:
    settings = settings or get_settings()
    init_logging(settings.log_level)
    if directory is None:
        directory = Directory.from_connection(get_connection(settings.db_path), settings=settings, client=client)

    app = FastAPI(
        title="ConnectAI",
        description="Professional networking directory with AI-assisted profiles and icebreakers",
    )
    app.state.directory = directory
    app.state.ai = directory.ai
    # Directory calls share one SQLite connection; serialize them
    app.state.lock = threading.Lock()
    install_error_handlers(app)
    app.include_router(api_router)
    return app
