import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from sensor_dashboard.core.logging_config import configure_logging
from sensor_dashboard.core.service_manager import service_manager
from sensor_dashboard.core.settings import settings
from sensor_dashboard.routers.api import router as api_router
from sensor_dashboard.routers.pages import router as pages_router
from sensor_dashboard.schemas import AppHealthOK

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup/shutdown without deprecated on_event."""
    configure_logging(settings.log_level)
    logger.info(f"Starting background services in {'demo' if settings.demo_mode else 'connected'} mode")
    await service_manager.start_services()
    try:
        yield
    finally:
        logger.info("Stopping background services")
        await service_manager.stop_services()


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)


@app.get("/health", tags=["meta"], response_model=AppHealthOK)
async def healthcheck() -> AppHealthOK:
    return AppHealthOK(status="ok", app=settings.app_name, demo_mode=settings.demo_mode)


# mount API router under /api
app.include_router(api_router, prefix="/api")
app.include_router(pages_router)
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
