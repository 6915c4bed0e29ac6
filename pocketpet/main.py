# pocketpet/main.py
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
import structlog

from pocketpet.api.v1.endpoints import pet_interactions
from pocketpet.core.clock import Clock
from pocketpet.core.logging_config import setup_logging
from pocketpet.core.settings import Settings, settings as default_settings
from pocketpet.services.session import PetSession

log = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("Application startup: loading pet and starting the simulation.",
                 storage_backend=settings.STORAGE_BACKEND)
        session = await PetSession.from_settings(settings, clock=clock)
        await session.start()
        app.state.session = session
        try:
            yield
        finally:
            log.info("Application shutdown: stopping the simulation.")
            try:
                await session.dispose()
            except Exception as e:
                log.error("Error during session shutdown", error=str(e))
            app.state.session = None
            log.info("Application shutdown complete.")

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.state.session = None
    app.include_router(pet_interactions.router, prefix=settings.API_V1_STR, tags=["pet"])

    @app.get("/")
    async def root():
        log.info("Root endpoint accessed.")
        return {"message": f"Welcome to the {settings.PROJECT_NAME} API!"}

    return app


setup_logging(log_level_str=default_settings.LOG_LEVEL)
app = create_app()

log.info(f"{default_settings.PROJECT_NAME} API starting up...")
