import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from song_library.api.endpoints import songs
from song_library.core.config import Settings, load_settings
from song_library.core.database import Database
from song_library.core.errors import DatabaseUnavailable
from song_library.core.http_client import HttpClientManager
from song_library.core.logging import setup_logging
from song_library.services.music_info import MusicInfoClient
from song_library.services.song_service import DB_ERRORS, SongService

logger = logging.getLogger(__name__)


def build_service(settings: Settings) -> SongService:
    HttpClientManager.configure(settings.external_api_timeout)
    return SongService(Database.from_settings(settings), MusicInfoClient(settings.external_api_url))


def create_app(settings: Optional[Settings] = None, service: Optional[SongService] = None) -> FastAPI:
    """
    Build the application. Pass `service` to run against a prebuilt
    SongService (tests); otherwise one is built from `settings`.
    """
    if service is None:
        service = build_service(settings or load_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # A failed connect or ping aborts startup
        await service.db.connect()
        try:
            yield
        finally:
            await service.db.close()
            await HttpClientManager.close()

    app = FastAPI(
        title="Song Library API",
        description="A simple API to manage a song library.",
        version="1.0.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.song_service = service
    app.include_router(songs.router)

    @app.get("/health", tags=["Health"])
    async def health_check():
        try:
            alive = await service.db.ping()
        except DB_ERRORS as e:
            logger.error(f"Database ping failed: {e}")
            alive = False
        if not alive:
            error = DatabaseUnavailable("ping failed")
            return JSONResponse(status_code=error.status_code, content=error.to_body())
        return {"status": "ok"}

    return app


def run() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)
    app = create_app(settings)
    logger.info(f"Backend API running on port {settings.app_port}")
    uvicorn.run(app, host=settings.app_host, port=settings.app_port, log_config=None)


if __name__ == "__main__":
    run()
